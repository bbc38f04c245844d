"""Scanner implementations and lookup by name."""

from __future__ import annotations

from importlib import metadata
from typing import Any, Callable, Dict, Iterable, List

from .base import Scanner
from .rust import RustScanner

_ENTRY_POINT_GROUP = "cratescan.scanners"

_BUILTIN_FACTORIES: Dict[str, Callable[..., Scanner]] = {
    "rust": RustScanner,
}


def available_scanners() -> List[str]:
    """Return the names of built-in and plugin scanners."""
    names = set(_BUILTIN_FACTORIES)
    names.update(entry.name.lower() for entry in _iter_entry_points())
    return sorted(names)


def create_scanner(name: str, **options: Any) -> Scanner:
    """Instantiate the scanner registered under ``name``.

    Keyword options are forwarded to the scanner constructor; built-ins win over
    plugins that reuse their name.
    """
    key = name.lower()
    factory = _BUILTIN_FACTORIES.get(key)
    if factory is None:
        for entry in _iter_entry_points():
            if entry.name.lower() != key:
                continue
            try:
                factory = entry.load()
            except Exception as exc:  # pragma: no cover - plugin import failure
                raise RuntimeError(f"Failed to load scanner entry point '{name}': {exc}") from exc
            break
    if factory is None:
        known = ", ".join(available_scanners())
        raise ValueError(f"Unknown scanner '{name}' (available: {known})")

    instance = factory(**options)
    if not isinstance(instance, Scanner):
        raise TypeError(f"Scanner factory for '{name}' did not return a Scanner instance")
    return instance


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = ["RustScanner", "Scanner", "available_scanners", "create_scanner"]
