"""Helper utilities for constructing temporary crate registries in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from cratescan.discovery import PackageScanner
from cratescan.models import Package


class CrateBuilder:
    """Writes extracted crates into a throwaway registry directory."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path.resolve() / "registry"
        self.root.mkdir()
        self._scanner = PackageScanner()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries relative to the registry root."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def crate(
        self,
        name: str,
        version: str = "0.1.0",
        files: Mapping[str, str] | None = None,
        *,
        manifest_extra: str = "",
        directory: str | None = None,
    ) -> Path:
        """Write a crate with a minimal manifest and return its directory."""
        crate_dir = directory or f"{name}-{version}"
        manifest = f'[package]\nname = "{name}"\nversion = "{version}"\n'
        if manifest_extra:
            manifest += "\n" + textwrap.dedent(manifest_extra).lstrip("\n")
        entries = {f"{crate_dir}/Cargo.toml": manifest}
        for relative, content in (files or {}).items():
            entries[f"{crate_dir}/{relative}"] = content
        self.write(entries)
        return self.root / crate_dir

    def scan(self) -> list[Package]:
        """Return packages discovered under the registry root."""
        return self._scanner.scan(self.root)


HELLO_MAIN = """
fn main() {
    println!("Hello, world!");
}
"""

BUSY_MAIN = """
fn main() {
    println!("Hello, world!");
    do_work();
}
"""

PUBLIC_LIB = """
pub fn add(a: i32, b: i32) -> i32 {
    a + b
}
"""

PRIVATE_LIB = """
fn helper() {}
"""


__all__ = ["BUSY_MAIN", "CrateBuilder", "HELLO_MAIN", "PRIVATE_LIB", "PUBLIC_LIB"]
