"""Core data models shared across cratescan components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


class TargetKind(str, Enum):
    """Compilation unit kinds a package can declare."""

    BINARY = "bin"
    LIBRARY = "lib"


class Verdict(str, Enum):
    """Classification outcome for a target or a package."""

    TRIVIAL = "trivial"
    NON_TRIVIAL = "non-trivial"
    ERROR = "error"
    AMBIGUOUS = "ambiguous"


class ErrorKind(str, Enum):
    """Why a target or package could not be classified."""

    PARSE = "parse"
    RESOLUTION = "resolution"
    MANIFEST = "manifest"
    MANIFEST_AMBIGUITY = "manifest-ambiguity"


class Visibility(str, Enum):
    PUBLIC = "public"
    RESTRICTED = "restricted"
    PRIVATE = "private"


class ItemKind(str, Enum):
    FUNCTION = "function"
    STRUCT = "struct"
    ENUM = "enum"
    UNION = "union"
    TYPE_ALIAS = "type"
    CONSTANT = "const"
    STATIC = "static"
    TRAIT = "trait"
    IMPL = "impl"
    MODULE = "mod"
    USE = "use"
    EXTERN_CRATE = "extern-crate"
    FOREIGN_MODULE = "foreign-mod"
    MACRO_DEFINITION = "macro-definition"
    MACRO_INVOCATION = "macro-invocation"


class StatementKind(str, Enum):
    MACRO_CALL = "macro-call"
    EXPRESSION = "expression"
    DECLARATION = "declaration"
    ITEM = "item"


@dataclass(frozen=True)
class Item:
    """A top-level declaration found in an entry-point file."""

    kind: ItemKind
    name: Optional[str]
    visibility: Visibility = Visibility.PRIVATE


@dataclass(frozen=True)
class Statement:
    """One statement inside the entry function body.

    ``macro_name``, ``argument_count`` and ``literal`` are only populated for
    macro calls; ``literal`` holds the first argument when it is a plain
    string literal.
    """

    kind: StatementKind
    text: str
    macro_name: Optional[str] = None
    argument_count: int = 0
    literal: Optional[str] = None


@dataclass(frozen=True)
class ScanResult:
    """Structural view of one source file.

    ``entry_body`` is ``None`` when the file declares no entry function.
    """

    items: Tuple[Item, ...]
    entry_body: Optional[Tuple[Statement, ...]] = None


@dataclass(frozen=True)
class Target:
    """A declared binary or library target with its resolved entry point."""

    kind: TargetKind
    name: str
    path: Path


@dataclass(frozen=True)
class Package:
    """One manifest root discovered under a scan path."""

    root: Path
    manifest_path: Path
    name: Optional[str] = None
    version: Optional[str] = None
    targets: Tuple[Target, ...] = ()
    ambiguous: bool = False
    conflicting_manifests: Tuple[Path, ...] = ()
    manifest_error: Optional[str] = None
    display_path: Optional[str] = None

    @property
    def identifier(self) -> str:
        if self.name and self.version:
            return f"{self.name}-{self.version}"
        if self.name:
            return self.name
        return self.display_path or self.root.as_posix()


@dataclass(frozen=True)
class TargetResult:
    """Verdict for a single target, with the error that prevented it if any."""

    target: Target
    verdict: Verdict
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class PackageReport:
    """Record handed to the reporting layer, one per discovered package."""

    identifier: str
    verdict: Verdict
    root: Path
    message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    targets: Tuple[TargetResult, ...] = field(default_factory=tuple)


__all__ = [
    "ErrorKind",
    "Item",
    "ItemKind",
    "Package",
    "PackageReport",
    "ScanResult",
    "Statement",
    "StatementKind",
    "Target",
    "TargetKind",
    "TargetResult",
    "Verdict",
    "Visibility",
]
