"""Tests for cratescan.discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from cratescan import discovery
from cratescan.discovery import PackageScanner, read_entry_point
from cratescan.errors import ResolutionError
from cratescan.models import TargetKind
from tests._fixtures.crate_builder import HELLO_MAIN, PRIVATE_LIB, CrateBuilder


def _targets(package) -> list[tuple[TargetKind, str, str]]:
    return [
        (target.kind, target.name, target.path.relative_to(package.root).as_posix())
        for target in package.targets
    ]


def test_scan_finds_default_targets(crate_builder: CrateBuilder) -> None:
    crate_builder.crate(
        "hello-cli",
        "1.2.3",
        files={"src/main.rs": HELLO_MAIN, "src/lib.rs": PRIVATE_LIB},
    )

    (package,) = crate_builder.scan()

    assert package.identifier == "hello-cli-1.2.3"
    assert package.ambiguous is False
    assert _targets(package) == [
        (TargetKind.BINARY, "hello-cli", "src/main.rs"),
        (TargetKind.LIBRARY, "hello_cli", "src/lib.rs"),
    ]


def test_scan_discovers_extra_binaries(crate_builder: CrateBuilder) -> None:
    crate_builder.crate(
        "tools",
        files={
            "src/main.rs": HELLO_MAIN,
            "src/bin/alpha.rs": HELLO_MAIN,
            "src/bin/beta/main.rs": HELLO_MAIN,
        },
    )

    (package,) = crate_builder.scan()

    assert _targets(package) == [
        (TargetKind.BINARY, "tools", "src/main.rs"),
        (TargetKind.BINARY, "alpha", "src/bin/alpha.rs"),
        (TargetKind.BINARY, "beta", "src/bin/beta/main.rs"),
    ]


def test_scan_honours_declared_paths(crate_builder: CrateBuilder) -> None:
    crate_builder.crate(
        "custom",
        files={"cli/run.rs": HELLO_MAIN, "core/root.rs": PRIVATE_LIB},
        manifest_extra="""
        [lib]
        name = "custom_core"
        path = "core/root.rs"

        [[bin]]
        name = "runner"
        path = "cli/run.rs"
        """,
    )

    (package,) = crate_builder.scan()

    assert _targets(package) == [
        (TargetKind.BINARY, "runner", "cli/run.rs"),
        (TargetKind.LIBRARY, "custom_core", "core/root.rs"),
    ]


def test_declared_bin_without_path_uses_cargo_defaults(crate_builder: CrateBuilder) -> None:
    crate_builder.crate(
        "app",
        files={"src/main.rs": HELLO_MAIN, "src/bin/extra.rs": HELLO_MAIN},
        manifest_extra="""
        [[bin]]
        name = "app"

        [[bin]]
        name = "extra"
        """,
    )

    (package,) = crate_builder.scan()

    assert _targets(package) == [
        (TargetKind.BINARY, "app", "src/main.rs"),
        (TargetKind.BINARY, "extra", "src/bin/extra.rs"),
    ]


def test_declared_but_missing_entry_point_is_kept(crate_builder: CrateBuilder) -> None:
    crate_builder.crate(
        "ghost",
        manifest_extra="""
        [lib]
        path = "src/missing.rs"
        """,
    )

    (package,) = crate_builder.scan()

    assert _targets(package) == [(TargetKind.LIBRARY, "ghost", "src/missing.rs")]
    with pytest.raises(ResolutionError):
        read_entry_point(package.targets[0].path)


def test_autobins_false_skips_discovery(tmp_path: Path) -> None:
    builder = CrateBuilder(tmp_path)
    builder.write(
        {
            "quiet-0.1.0/Cargo.toml": '[package]\nname = "quiet"\nversion = "0.1.0"\nautobins = false\n',
            "quiet-0.1.0/src/main.rs": HELLO_MAIN,
        }
    )

    (package,) = builder.scan()

    assert package.targets == ()


def test_nested_manifest_marks_both_packages_ambiguous(crate_builder: CrateBuilder) -> None:
    crate_builder.crate("outer", files={"src/main.rs": HELLO_MAIN})
    crate_builder.crate("inner", directory="outer-0.1.0/tests/fixture")

    packages = {package.identifier: package for package in crate_builder.scan()}

    assert set(packages) == {"outer-0.1.0", "inner-0.1.0"}
    assert packages["outer-0.1.0"].ambiguous
    assert packages["outer-0.1.0"].conflicting_manifests == (
        Path("outer-0.1.0/tests/fixture/Cargo.toml"),
    )
    assert packages["inner-0.1.0"].ambiguous
    assert packages["inner-0.1.0"].conflicting_manifests == (Path("outer-0.1.0/Cargo.toml"),)


def test_sibling_crates_are_not_ambiguous(crate_builder: CrateBuilder) -> None:
    crate_builder.crate("one", files={"src/main.rs": HELLO_MAIN})
    crate_builder.crate("two", files={"src/lib.rs": PRIVATE_LIB})

    packages = crate_builder.scan()

    assert [package.identifier for package in packages] == ["one-0.1.0", "two-0.1.0"]
    assert not any(package.ambiguous for package in packages)


def test_invalid_manifest_is_recorded_not_raised(crate_builder: CrateBuilder) -> None:
    crate_builder.write({"broken/Cargo.toml": "[package\nname = 'x'\n"})
    crate_builder.write({"workspace/Cargo.toml": "[workspace]\nmembers = []\n"})

    packages = {package.identifier: package for package in crate_builder.scan()}

    assert set(packages) == {"broken", "workspace"}
    assert "invalid manifest" in (packages["broken"].manifest_error or "")
    assert "[package]" in (packages["workspace"].manifest_error or "")


def test_excluded_directories_are_skipped(crate_builder: CrateBuilder) -> None:
    crate_builder.crate("kept", files={"src/main.rs": HELLO_MAIN})
    crate_builder.crate("built", directory="kept-0.1.0/target/package/built-0.1.0")

    (package,) = crate_builder.scan()

    assert package.identifier == "kept-0.1.0"
    assert not package.ambiguous


def test_custom_manifest_names(tmp_path: Path) -> None:
    builder = CrateBuilder(tmp_path)
    builder.crate("plain", files={"src/main.rs": HELLO_MAIN})

    packages = PackageScanner(manifest_names=["Manifest.toml"]).scan(builder.root)

    assert packages == []


def test_scan_rejects_missing_root(tmp_path: Path) -> None:
    missing = tmp_path / "missing"
    with pytest.raises(FileNotFoundError) as excinfo:
        PackageScanner().scan(missing)
    assert str(missing) in str(excinfo.value)


def test_scan_rejects_file_root(tmp_path: Path) -> None:
    file_root = tmp_path / "crate.tar"
    file_root.write_text("", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        discovery.check_root(file_root)


def test_check_root_rejects_unreadable_root(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(discovery.os, "access", lambda *args, **kwargs: False)

    with pytest.raises(PermissionError) as excinfo:
        discovery.check_root(tmp_path)
    assert "not readable" in str(excinfo.value)


def test_broken_nested_manifest_keeps_ambiguity(crate_builder: CrateBuilder) -> None:
    crate_builder.crate("outer", files={"src/main.rs": HELLO_MAIN})
    crate_builder.write({"outer-0.1.0/tests/fixture/Cargo.toml": "[package\n"})

    packages = {package.identifier: package for package in crate_builder.scan()}

    fixture = packages["outer-0.1.0/tests/fixture"]
    assert fixture.ambiguous
    assert fixture.manifest_error is not None
    assert fixture.conflicting_manifests == (Path("outer-0.1.0/Cargo.toml"),)
