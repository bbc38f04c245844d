"""CLI entrypoint for cratescan."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, REPORT_FORMATS, ConfigError, load_config
from .logging import configure_logging
from .models import Verdict
from .orchestrator import Orchestrator
from .report import write_reports


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cratescan",
        description=(
            "Scan paths containing extracted crates and report whether each crate "
            "implements non-trivial code."
        ),
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Directories to search recursively for crate manifests.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log discovery and per-target verdicts to stderr.",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log errors to stderr.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=(
            f"Configuration file, or a directory holding {CONFIG_FILENAME} "
            f"(defaults to ./{CONFIG_FILENAME} when present)."
        ),
    )
    parser.add_argument(
        "--format",
        choices=REPORT_FORMATS,
        default=None,
        help="Output format for package reports (default: text).",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=_positive_int,
        default=None,
        help="Number of worker threads used to classify packages.",
    )
    parser.add_argument(
        "--verdict",
        action="append",
        choices=[verdict.value for verdict in Verdict],
        default=None,
        help="Only report packages with this verdict (repeatable).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for cratescan."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    if args.config is not None and not args.config.exists():
        parser.exit(1, f"cratescan: config path not found: {args.config}\n")
    try:
        config = load_config(args.config if args.config is not None else Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"cratescan: {exc}\n")

    output_format = args.format or config.report.format
    verdicts = [Verdict(value) for value in args.verdict] if args.verdict else config.report.verdicts

    try:
        orchestrator = Orchestrator(config=config, jobs=args.jobs)
    except (ValueError, TypeError, RuntimeError) as exc:
        parser.exit(1, f"cratescan: {exc}\n")

    try:
        write_reports(
            orchestrator.iter_reports(args.paths),
            sys.stdout,
            output_format=output_format,
            verdicts=verdicts,
        )
    except OSError as exc:
        parser.exit(1, f"cratescan: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
