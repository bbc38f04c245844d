"""Package discovery: manifest walking, target resolution and entry-point loading."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .errors import ManifestError, ResolutionError
from .logging import get_logger
from .models import Package, Target, TargetKind

DEFAULT_MANIFEST_NAMES: Tuple[str, ...] = ("Cargo.toml", "cargo.toml")

DEFAULT_EXCLUDED_DIRS: Tuple[str, ...] = (
    ".git",
    ".hg",
    ".svn",
    "target",
    "node_modules",
    "__pycache__",
)

_logger = get_logger("discovery")


def read_entry_point(path: Path) -> str:
    """Return the text of an entry-point file or raise ``ResolutionError``."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ResolutionError(f"entry point not found: {path}", path=path) from exc
    except IsADirectoryError as exc:
        raise ResolutionError(f"entry point is a directory: {path}", path=path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ResolutionError(f"cannot read entry point {path}: {exc}", path=path) from exc


def load_manifest(path: Path) -> Dict[str, Any]:
    """Parse a Cargo manifest, raising ``ManifestError`` on any failure."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"cannot read manifest: {exc}", path=path) from exc
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestError(f"invalid manifest: {exc}", path=path) from exc

    package = data.get("package")
    if not isinstance(package, dict):
        raise ManifestError("manifest has no [package] table", path=path)
    if not isinstance(package.get("name"), str) or not package["name"]:
        raise ManifestError("manifest [package] has no name", path=path)
    return data


def resolve_targets(root: Path, manifest: Mapping[str, Any]) -> Tuple[Target, ...]:
    """Resolve binary and library entry points for a parsed manifest.

    Declared paths are returned even when the file is missing so the failure is
    reported against the target instead of silently dropping it.
    """
    package = manifest["package"]
    package_name = package["name"]
    targets = list(_binary_targets(root, manifest, package_name))
    library = _library_target(root, manifest, package_name)
    if library is not None:
        targets.append(library)
    return tuple(targets)


def _binary_targets(
    root: Path, manifest: Mapping[str, Any], package_name: str
) -> Iterator[Target]:
    seen_names: set[str] = set()
    seen_paths: set[Path] = set()

    declared = manifest.get("bin")
    if isinstance(declared, list):
        for entry in declared:
            if not isinstance(entry, dict):
                continue
            name = _as_str(entry.get("name")) or package_name
            path_value = _as_str(entry.get("path"))
            if path_value:
                path = root / path_value
            elif name == package_name:
                path = root / "src" / "main.rs"
            else:
                path = _default_bin_path(root, name)
            seen_names.add(name)
            seen_paths.add(path)
            yield Target(kind=TargetKind.BINARY, name=name, path=path)

    if manifest["package"].get("autobins") is False:
        return

    for name, path in _discovered_bins(root, package_name):
        if name in seen_names or path in seen_paths:
            continue
        seen_names.add(name)
        seen_paths.add(path)
        yield Target(kind=TargetKind.BINARY, name=name, path=path)


def _default_bin_path(root: Path, name: str) -> Path:
    single = root / "src" / "bin" / f"{name}.rs"
    nested = root / "src" / "bin" / name / "main.rs"
    if not single.exists() and nested.exists():
        return nested
    return single


def _discovered_bins(root: Path, package_name: str) -> Iterator[Tuple[str, Path]]:
    main = root / "src" / "main.rs"
    if main.is_file():
        yield package_name, main

    bin_dir = root / "src" / "bin"
    if not bin_dir.is_dir():
        return
    for child in sorted(bin_dir.iterdir()):
        if child.is_file() and child.suffix == ".rs":
            yield child.stem, child
        elif child.is_dir() and (child / "main.rs").is_file():
            yield child.name, child / "main.rs"


def _library_target(
    root: Path, manifest: Mapping[str, Any], package_name: str
) -> Optional[Target]:
    declared = manifest.get("lib")
    default_name = package_name.replace("-", "_")
    default_path = root / "src" / "lib.rs"

    if isinstance(declared, dict):
        name = _as_str(declared.get("name")) or default_name
        path_value = _as_str(declared.get("path"))
        path = root / path_value if path_value else default_path
        return Target(kind=TargetKind.LIBRARY, name=name, path=path)

    if default_path.is_file():
        return Target(kind=TargetKind.LIBRARY, name=default_name, path=default_path)
    return None


def check_root(root: str | Path) -> Path:
    """Resolve a scan root, raising ``OSError`` subclasses when it cannot be walked."""
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Scan path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Scan path is not a directory: {root}")
    if not os.access(root_path, os.R_OK | os.X_OK):
        raise PermissionError(f"Scan path is not readable: {root}")
    return root_path


class PackageScanner:
    """Walks scan roots and turns every manifest into a :class:`Package`."""

    def __init__(
        self,
        manifest_names: Sequence[str] = DEFAULT_MANIFEST_NAMES,
        exclude_dirs: Sequence[str] = DEFAULT_EXCLUDED_DIRS,
    ) -> None:
        self.manifest_names = tuple(manifest_names)
        self.exclude_dirs = frozenset(exclude_dirs)

    def scan(self, root: str | Path) -> List[Package]:
        """Return packages found under ``root`` in path order.

        Raises ``FileNotFoundError``, ``NotADirectoryError`` or
        ``PermissionError`` when the root itself cannot be walked.
        """
        root_path = check_root(root)
        manifests = self._collect_manifests(root_path)
        conflicts = _nested_conflicts(manifests, root_path)
        _logger.debug("Found %d manifest directories under %s", len(manifests), root_path)

        return [
            self._load_package(root_path, directory, manifests[directory], conflicts[directory])
            for directory in sorted(manifests)
        ]

    def _collect_manifests(self, root: Path) -> Dict[Path, List[Path]]:
        found: Dict[Path, List[Path]] = {}
        for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
            dirnames[:] = sorted(name for name in dirnames if name not in self.exclude_dirs)
            matches = [
                Path(dirpath) / name
                for name in self.manifest_names
                if name in filenames
            ]
            if matches:
                found[Path(dirpath)] = matches
        return found

    def _load_package(
        self,
        root: Path,
        directory: Path,
        manifest_files: Sequence[Path],
        conflicts: Sequence[Path],
    ) -> Package:
        manifest_path = manifest_files[0]
        display_path = directory.relative_to(root).as_posix() or "."
        conflicting = tuple(path.relative_to(root) for path in conflicts)

        try:
            manifest = load_manifest(manifest_path)
        except ManifestError as exc:
            _logger.warning("Could not load %s: %s", manifest_path, exc)
            return Package(
                root=directory,
                manifest_path=manifest_path,
                ambiguous=bool(conflicting),
                conflicting_manifests=conflicting,
                manifest_error=str(exc),
                display_path=display_path,
            )

        package = manifest["package"]
        version = package.get("version")
        return Package(
            root=directory,
            manifest_path=manifest_path,
            name=package["name"],
            version=version if isinstance(version, str) else None,
            targets=resolve_targets(directory, manifest),
            ambiguous=bool(conflicting),
            conflicting_manifests=conflicting,
            display_path=display_path,
        )


def _nested_conflicts(
    manifests: Mapping[Path, Sequence[Path]], root: Path
) -> Dict[Path, List[Path]]:
    """Map each manifest directory to the manifests that overlap its subtree.

    Two manifests in one directory conflict with each other; a manifest inside
    another package's directory conflicts with that package in both directions.
    """
    conflicts: Dict[Path, List[Path]] = {directory: [] for directory in manifests}
    for directory, files in manifests.items():
        conflicts[directory].extend(files[1:])
        if directory == root:
            continue
        for parent in directory.parents:
            if parent in manifests:
                conflicts[directory].append(manifests[parent][0])
                conflicts[parent].append(files[0])
            if parent == root:
                break
    return conflicts


def _log_walk_error(error: OSError) -> None:
    _logger.warning("Skipping unreadable directory %s: %s", error.filename, error.strerror)


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


__all__ = [
    "DEFAULT_EXCLUDED_DIRS",
    "DEFAULT_MANIFEST_NAMES",
    "PackageScanner",
    "check_root",
    "load_manifest",
    "read_entry_point",
    "resolve_targets",
]
