"""Binary, library and package triviality classifiers."""

from .binary import classify_binary, classify_entry_body
from .library import classify_items, classify_library
from .package import PackageClassifier, reduce_verdicts

__all__ = [
    "PackageClassifier",
    "classify_binary",
    "classify_entry_body",
    "classify_items",
    "classify_library",
    "reduce_verdicts",
]
