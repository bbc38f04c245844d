"""Tests for report rendering."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from cratescan.models import ErrorKind, PackageReport, Target, TargetKind, TargetResult, Verdict
from cratescan.report import filter_reports, format_text, report_to_dict, write_reports


def _reports() -> list[PackageReport]:
    target = Target(kind=TargetKind.BINARY, name="hello", path=Path("/r/hello-0.1.0/src/main.rs"))
    return [
        PackageReport(
            identifier="hello-0.1.0",
            verdict=Verdict.TRIVIAL,
            root=Path("/r/hello-0.1.0"),
            targets=(TargetResult(target=target, verdict=Verdict.TRIVIAL),),
        ),
        PackageReport(
            identifier="busy-0.1.0",
            verdict=Verdict.NON_TRIVIAL,
            root=Path("/r/busy-0.1.0"),
        ),
        PackageReport(
            identifier="broken",
            verdict=Verdict.ERROR,
            root=Path("/r/broken"),
            message="invalid manifest:\n  bad key",
            error_kind=ErrorKind.MANIFEST,
        ),
    ]


def test_format_text_collapses_message_whitespace() -> None:
    lines = [format_text(report) for report in _reports()]

    assert lines == [
        "trivial\thello-0.1.0",
        "non-trivial\tbusy-0.1.0",
        "error\tbroken\tinvalid manifest: bad key",
    ]


def test_report_to_dict_includes_targets() -> None:
    payload = report_to_dict(_reports()[0])

    assert payload["package"] == "hello-0.1.0"
    assert payload["verdict"] == "trivial"
    assert payload["targets"] == [
        {
            "kind": "bin",
            "name": "hello",
            "path": "/r/hello-0.1.0/src/main.rs",
            "verdict": "trivial",
            "error": None,
            "message": None,
        }
    ]


def test_filter_reports_keeps_everything_without_selection() -> None:
    assert len(list(filter_reports(_reports()))) == 3
    selected = list(filter_reports(_reports(), [Verdict.ERROR]))
    assert [report.identifier for report in selected] == ["broken"]


def test_write_reports_json_lines() -> None:
    stream = io.StringIO()

    written = write_reports(_reports(), stream, output_format="json", verdicts=[Verdict.ERROR])

    assert written == 1
    (line,) = stream.getvalue().splitlines()
    payload = json.loads(line)
    assert payload["package"] == "broken"
    assert payload["error"] == "manifest"


def test_write_reports_rejects_unknown_format() -> None:
    with pytest.raises(ValueError):
        write_reports(_reports(), io.StringIO(), output_format="xml")
