"""Triviality rules for library targets."""

from __future__ import annotations

from typing import Callable, Iterable

from ..models import Item, ScanResult, Verdict
from ..scanners.base import Scanner

ItemPredicate = Callable[[Item], bool]


def classify_items(items: Iterable[Item], is_exported: ItemPredicate) -> Verdict:
    """Return NON_TRIVIAL as soon as one item is part of the public surface.

    Re-exports count like any other exported item; their targets are not
    followed.
    """
    for item in items:
        if is_exported(item):
            return Verdict.NON_TRIVIAL
    return Verdict.TRIVIAL


def classify_library(scan: ScanResult, scanner: Scanner) -> Verdict:
    return classify_items(scan.items, scanner.is_exported)


__all__ = ["ItemPredicate", "classify_items", "classify_library"]
