"""Scan orchestration: discovery followed by per-package classification."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .classifiers import PackageClassifier
from .config import CrateScanConfig
from .discovery import PackageScanner, check_root
from .logging import get_logger
from .models import Package, PackageReport
from .scanners import Scanner, create_scanner


class Orchestrator:
    """Coordinates discovery and classification across scan roots."""

    def __init__(
        self,
        config: CrateScanConfig | None = None,
        scanner: Scanner | None = None,
        package_scanner: PackageScanner | None = None,
        classifier: PackageClassifier | None = None,
        jobs: Optional[int] = None,
    ) -> None:
        self.config = config or CrateScanConfig(root=Path.cwd())
        self.scanner = scanner or create_scanner(
            self.config.scanner, **self.config.scanner_options()
        )
        self.package_scanner = package_scanner or PackageScanner(
            manifest_names=self.config.manifest_names,
            exclude_dirs=self.config.exclude_dirs,
        )
        self.classifier = classifier or PackageClassifier(self.scanner)
        self.jobs = max(1, jobs if jobs is not None else self.config.jobs)
        self.logger = get_logger("orchestrator")

    def run(self, paths: Sequence[str | Path]) -> List[PackageReport]:
        """Classify every package under ``paths`` and return the reports."""
        return list(self.iter_reports(paths))

    def iter_reports(self, paths: Sequence[str | Path]) -> Iterator[PackageReport]:
        """Yield one report per discovered package, root by root.

        Every root is checked before the first one is walked, so an unusable
        path fails the run before any report is produced.
        """
        roots = [check_root(path) for path in paths]
        for root in roots:
            self.logger.info("Scanning %s", root)
            packages = self.package_scanner.scan(root)
            self.logger.debug("Discovered %d packages under %s", len(packages), root)
            yield from self._classify_all(packages)

    def _classify_all(self, packages: Sequence[Package]) -> Iterator[PackageReport]:
        if self.jobs == 1 or len(packages) < 2:
            for package in packages:
                yield self.classifier.classify(package)
            return
        # Packages share no state, so they can be classified on any worker; map keeps order.
        with ThreadPoolExecutor(max_workers=self.jobs) as executor:
            yield from executor.map(self.classifier.classify, packages)


__all__ = ["Orchestrator"]
