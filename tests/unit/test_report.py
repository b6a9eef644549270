"""Unit tests for the run report."""

import json
from pathlib import Path

from builder_ci.report import (
    STATUS_BUILT,
    STATUS_FAILED,
    STATUS_SKIPPED,
    DefinitionReport,
    RunSummary,
    create_run_report,
    write_run_report,
)


def _summary() -> RunSummary:
    return RunSummary(
        results=[
            DefinitionReport(name="foo", status=STATUS_BUILT, version="1.0", release=1, members=["foo"]),
            DefinitionReport(name="bar", status=STATUS_SKIPPED, version="2.0", release=1, members=["bar"]),
            DefinitionReport(name="baz", status=STATUS_FAILED, error="SrcinfoParseError: pkgrel is missing"),
        ]
    )


class TestRunSummary:
    def test_failed_run_is_not_ok(self) -> None:
        summary = _summary()

        assert summary.ok is False
        assert [r.name for r in summary.failed] == ["baz"]

    def test_empty_run_is_ok(self) -> None:
        assert RunSummary().ok is True

    def test_aborted_run_is_not_ok(self) -> None:
        assert RunSummary(aborted=True).ok is False


class TestRunReport:
    def test_create_run_report(self, tmp_path: Path) -> None:
        """集計と定義ごとの結果を含むこと."""
        report = create_run_report(_summary(), tmp_path / "repo", builder_version="9.9.9")

        assert report["statistics"] == {"built": 1, "skipped": 1, "failed": 1}
        assert report["run_info"]["builder_version"] == "9.9.9"
        assert report["run_info"]["aborted"] is False
        assert report["definitions"][2]["error"].startswith("SrcinfoParseError")

    def test_write_run_report(self, tmp_path: Path) -> None:
        output = tmp_path / "reports" / "build_report.json"

        write_run_report(create_run_report(_summary(), tmp_path), output)

        loaded = json.loads(output.read_text(encoding="utf-8"))
        assert [d["name"] for d in loaded["definitions"]] == ["foo", "bar", "baz"]
