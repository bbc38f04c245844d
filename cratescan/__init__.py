"""Classify extracted crates as trivial or non-trivial from their entry points."""

from .classifiers import PackageClassifier, reduce_verdicts
from .models import PackageReport, TargetKind, Verdict
from .orchestrator import Orchestrator
from .scanners import RustScanner, Scanner, create_scanner

__version__ = "0.1.0"

__all__ = [
    "Orchestrator",
    "PackageClassifier",
    "PackageReport",
    "RustScanner",
    "Scanner",
    "TargetKind",
    "Verdict",
    "create_scanner",
    "reduce_verdicts",
]
