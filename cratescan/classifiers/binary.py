"""Triviality rules for binary targets."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..models import ItemKind, ScanResult, Statement, Verdict
from ..scanners.base import Scanner

StatementPredicate = Callable[[Statement], bool]


def classify_entry_body(
    body: Optional[Sequence[Statement]], is_noop: StatementPredicate
) -> Verdict:
    """Classify the statements of a program's entry function.

    An empty (or absent) body does nothing and is trivial. Otherwise the body
    is trivial only when it is a single statement accepted by ``is_noop``.
    """
    if not body:
        return Verdict.TRIVIAL
    if len(body) == 1 and is_noop(body[0]):
        return Verdict.TRIVIAL
    return Verdict.NON_TRIVIAL


def classify_binary(scan: ScanResult, scanner: Scanner) -> Verdict:
    """Classify a scanned binary entry file.

    Any top-level function besides the entry function marks the binary as
    doing real work before its body is even looked at.
    """
    for item in scan.items:
        if item.kind is ItemKind.FUNCTION and item.name != scanner.entry_function:
            return Verdict.NON_TRIVIAL
    return classify_entry_body(scan.entry_body, scanner.is_noop_statement)


__all__ = ["StatementPredicate", "classify_binary", "classify_entry_body"]
