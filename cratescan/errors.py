"""Exception hierarchy for per-target and per-package failures."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .models import ErrorKind


class CrateScanError(RuntimeError):
    """Base class for failures that are recorded instead of aborting a scan."""

    kind: ErrorKind

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class ParseError(CrateScanError):
    """Raised when entry-point text is not syntactically valid."""

    kind = ErrorKind.PARSE


class ResolutionError(CrateScanError):
    """Raised when a target's entry file cannot be located or read."""

    kind = ErrorKind.RESOLUTION


class ManifestError(CrateScanError):
    """Raised when a package manifest cannot be read or lacks required fields."""

    kind = ErrorKind.MANIFEST


class ManifestAmbiguityError(CrateScanError):
    """Raised when a package subtree contains another manifest."""

    kind = ErrorKind.MANIFEST_AMBIGUITY


__all__ = [
    "CrateScanError",
    "ManifestAmbiguityError",
    "ManifestError",
    "ParseError",
    "ResolutionError",
]
