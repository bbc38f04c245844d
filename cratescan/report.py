"""Rendering of package reports for terminal and machine consumption."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, TextIO

from .models import PackageReport, Verdict


def filter_reports(
    reports: Iterable[PackageReport], verdicts: Optional[Sequence[Verdict]] = None
) -> Iterator[PackageReport]:
    """Yield reports whose verdict is selected; no selection keeps everything."""
    selected = set(verdicts or ())
    for report in reports:
        if not selected or report.verdict in selected:
            yield report


def format_text(report: PackageReport) -> str:
    """``<verdict>\\t<identifier>[\\t<message>]`` on a single line."""
    fields = [report.verdict.value, report.identifier]
    if report.message:
        fields.append(" ".join(report.message.split()))
    return "\t".join(fields)


def report_to_dict(report: PackageReport) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "package": report.identifier,
        "verdict": report.verdict.value,
        "root": report.root.as_posix(),
        "message": report.message,
    }
    if report.error_kind is not None:
        payload["error"] = report.error_kind.value
    payload["targets"] = [
        {
            "kind": result.target.kind.value,
            "name": result.target.name,
            "path": result.target.path.as_posix(),
            "verdict": result.verdict.value,
            "error": result.error_kind.value if result.error_kind else None,
            "message": result.message,
        }
        for result in report.targets
    ]
    return payload


def format_json(report: PackageReport) -> str:
    return json.dumps(report_to_dict(report), sort_keys=True)


_FORMATTERS = {
    "text": format_text,
    "json": format_json,
}


def write_reports(
    reports: Iterable[PackageReport],
    stream: TextIO,
    *,
    output_format: str = "text",
    verdicts: Optional[Sequence[Verdict]] = None,
) -> int:
    """Write selected reports line by line and return how many were written."""
    try:
        formatter = _FORMATTERS[output_format]
    except KeyError as exc:
        raise ValueError(f"Unknown report format: {output_format}") from exc

    written = 0
    for report in filter_reports(reports, verdicts):
        stream.write(formatter(report) + "\n")
        written += 1
    stream.flush()
    return written


__all__ = [
    "filter_reports",
    "format_json",
    "format_text",
    "report_to_dict",
    "write_reports",
]
