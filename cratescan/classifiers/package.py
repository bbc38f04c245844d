"""Per-package orchestration of the binary and library classifiers."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from .binary import classify_binary
from .library import classify_library
from ..discovery import read_entry_point
from ..errors import CrateScanError, ManifestAmbiguityError, ManifestError
from ..logging import get_logger
from ..models import (
    Package,
    PackageReport,
    Target,
    TargetKind,
    TargetResult,
    Verdict,
)
from ..scanners.base import Scanner

EntryReader = Callable[[Path], str]


def reduce_verdicts(verdicts: Iterable[Verdict], *, ambiguous: bool = False) -> Verdict:
    """Fold target verdicts into a package verdict.

    Ambiguity wins over everything. A non-trivial target masks errors in its
    siblings, an error masks trivial siblings, and a package with no targets
    at all is trivial.
    """
    if ambiguous:
        return Verdict.AMBIGUOUS
    seen = set(verdicts)
    if Verdict.AMBIGUOUS in seen:
        return Verdict.AMBIGUOUS
    if Verdict.NON_TRIVIAL in seen:
        return Verdict.NON_TRIVIAL
    if Verdict.ERROR in seen:
        return Verdict.ERROR
    return Verdict.TRIVIAL


class PackageClassifier:
    """Classifies every target of a package and reduces to one report."""

    def __init__(self, scanner: Scanner, reader: EntryReader = read_entry_point) -> None:
        self.scanner = scanner
        self._reader = reader
        self.logger = get_logger("classifier")

    def classify_source(self, kind: TargetKind, source: str) -> Verdict:
        """Classify already-loaded entry-point text. Raises ``ParseError``."""
        scan = self.scanner.scan(source)
        if kind is TargetKind.BINARY:
            return classify_binary(scan, self.scanner)
        return classify_library(scan, self.scanner)

    def classify_target(self, target: Target) -> TargetResult:
        try:
            source = self._reader(target.path)
            verdict = self.classify_source(target.kind, source)
        except CrateScanError as exc:
            self.logger.warning(
                "Could not classify %s target %s (%s): %s",
                target.kind.value,
                target.name,
                target.path,
                exc,
            )
            return TargetResult(
                target=target,
                verdict=Verdict.ERROR,
                error_kind=exc.kind,
                message=str(exc),
            )
        self.logger.debug("%s target %s is %s", target.kind.value, target.name, verdict.value)
        return TargetResult(target=target, verdict=verdict)

    def classify(self, package: Package) -> PackageReport:
        """Classify a package; ambiguous packages never have their targets read."""
        if package.manifest_error is not None and not package.ambiguous:
            error: CrateScanError = ManifestError(
                package.manifest_error, path=package.manifest_path
            )
            self.logger.warning("Skipping %s: %s", package.manifest_path, error)
            return PackageReport(
                identifier=package.identifier,
                verdict=Verdict.ERROR,
                root=package.root,
                message=str(error),
                error_kind=error.kind,
            )

        results: tuple[TargetResult, ...] = ()
        if not package.ambiguous:
            results = tuple(self.classify_target(target) for target in package.targets)
        verdict = reduce_verdicts(
            (result.verdict for result in results), ambiguous=package.ambiguous
        )
        self.logger.debug("%s is %s", package.identifier, verdict.value)

        if verdict is Verdict.AMBIGUOUS:
            message = _ambiguity_message(package.conflicting_manifests)
            if package.manifest_error is not None:
                message = f"{message}; {package.manifest_error}"
            error = ManifestAmbiguityError(message, path=package.manifest_path)
            self.logger.info("%s is ambiguous: %s", package.identifier, error)
            return PackageReport(
                identifier=package.identifier,
                verdict=verdict,
                root=package.root,
                message=str(error),
                error_kind=error.kind,
                targets=results,
            )

        message = _error_summary(results) if verdict is Verdict.ERROR else None
        return PackageReport(
            identifier=package.identifier,
            verdict=verdict,
            root=package.root,
            message=message,
            targets=results,
        )


def _ambiguity_message(conflicts: Sequence[Path]) -> str:
    if not conflicts:
        return "nested manifest detected"
    listed = ", ".join(path.as_posix() for path in conflicts)
    return f"nested manifest detected: {listed}"


def _error_summary(results: Sequence[TargetResult]) -> Optional[str]:
    messages = [
        f"{result.target.kind.value} {result.target.name}: {result.message}"
        for result in results
        if result.verdict is Verdict.ERROR
    ]
    return "; ".join(messages) or None


__all__ = ["EntryReader", "PackageClassifier", "reduce_verdicts"]
