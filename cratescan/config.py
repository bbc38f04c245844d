"""Configuration loading for cratescan (.cratescan.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from .discovery import DEFAULT_EXCLUDED_DIRS, DEFAULT_MANIFEST_NAMES
from .models import Verdict
from .scanners.rust import DEFAULT_ENTRY_FUNCTION, DEFAULT_GREETINGS, DEFAULT_PRINT_MACROS

CONFIG_FILENAME = ".cratescan.yml"

REPORT_FORMATS = ("text", "json")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ReportConfig:
    """Output settings."""

    format: str = "text"
    verdicts: List[Verdict] = field(default_factory=list)


@dataclass
class CrateScanConfig:
    """Represents the settings defined in .cratescan.yml."""

    root: Path
    scanner: str = "rust"
    greetings: Tuple[str, ...] = DEFAULT_GREETINGS
    print_macros: Tuple[str, ...] = DEFAULT_PRINT_MACROS
    entry_function: str = DEFAULT_ENTRY_FUNCTION
    manifest_names: Tuple[str, ...] = DEFAULT_MANIFEST_NAMES
    exclude_dirs: Tuple[str, ...] = DEFAULT_EXCLUDED_DIRS
    jobs: int = 1
    report: ReportConfig = field(default_factory=ReportConfig)

    def scanner_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``create_scanner``."""
        return {
            "greetings": self.greetings,
            "print_macros": self.print_macros,
            "entry_function": self.entry_function,
        }


def load_config(config_path: Path) -> CrateScanConfig:
    """Load configuration from a file or a directory holding .cratescan.yml.

    A missing file yields the defaults.
    """
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CrateScanConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    config = CrateScanConfig(root=root)

    scanner = _as_str(data.get("scanner"))
    if scanner:
        config.scanner = scanner

    greetings = _as_str_list(data.get("greetings"))
    if greetings:
        config.greetings = tuple(greetings)

    print_macros = _as_str_list(data.get("print_macros"))
    if print_macros:
        config.print_macros = tuple(name.rstrip("!") for name in print_macros)

    entry_function = _as_str(data.get("entry_function"))
    if entry_function:
        config.entry_function = entry_function

    manifest_names = _as_str_list(data.get("manifest_names"))
    if manifest_names:
        config.manifest_names = tuple(manifest_names)

    if "exclude_dirs" in data:
        config.exclude_dirs = tuple(_as_str_list(data.get("exclude_dirs")))

    jobs = _as_int(data.get("jobs"))
    if jobs is not None:
        if jobs < 1:
            raise ConfigError("jobs must be a positive integer")
        config.jobs = jobs

    report_data = _as_dict(data.get("report"))
    if report_data:
        report_format = _as_str(report_data.get("format"))
        if report_format:
            if report_format not in REPORT_FORMATS:
                raise ConfigError(
                    f"report.format must be one of {', '.join(REPORT_FORMATS)}, got {report_format!r}"
                )
            config.report.format = report_format
        config.report.verdicts = _as_verdict_list(report_data.get("verdicts"))

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_verdict_list(value: Any) -> List[Verdict]:
    verdicts: List[Verdict] = []
    for name in _as_str_list(value):
        try:
            verdicts.append(Verdict(name))
        except ValueError as exc:
            choices = ", ".join(verdict.value for verdict in Verdict)
            raise ConfigError(f"Unknown verdict {name!r} (expected one of {choices})") from exc
    return verdicts


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "CrateScanConfig",
    "REPORT_FORMATS",
    "ReportConfig",
    "load_config",
]
