"""Tests for artifact_prune/reports.py module."""

from __future__ import annotations

import json
import logging

from artifact_prune.reconciler import Deleted, Failed, PruneSummary
from artifact_prune.reports import build_report_payload, format_summary_line, print_summary, write_report_json
from artifact_prune.runner import PruneReport
from tests.assertions import assert_equal


def _report(dry_run=False) -> PruneReport:
    summary = PruneSummary()
    summary.record(Deleted("static/js/old.js"))
    summary.record(Failed("static/css/old.css", "AccessDenied - Access Denied"))
    return PruneReport(
        bucket="site",
        local_count=3,
        remote_count=5,
        orphans=("static/css/old.css", "static/js/old.js"),
        summary=summary if not dry_run else PruneSummary(),
        dry_run=dry_run,
    )


def test_format_summary_line_counts():
    """Test the summary line carries deleted and failed counts."""
    assert_equal(format_summary_line(_report()), "Prune complete: 1 deleted, 1 failed")


def test_format_summary_line_mentions_skipped():
    """Test cancelled runs report skipped orphans."""
    report = _report()
    report.summary.record_skipped("x")

    assert "1 skipped" in format_summary_line(report)


def test_format_summary_line_dry_run():
    """Test dry runs describe what would be deleted."""
    assert_equal(format_summary_line(_report(dry_run=True)), "Dry run: 2 orphan(s) in site would be deleted")


def test_print_summary_lists_failures(capsys, caplog):
    """Test the summary is printed and each failure is logged with its reason."""
    with caplog.at_level(logging.ERROR):
        print_summary(_report())

    out = capsys.readouterr().out
    assert "Compared 3 local file(s) with 5 remote object(s) in site: 2 orphan(s)" in out
    assert "Prune complete: 1 deleted, 1 failed" in out
    assert "static/css/old.css: AccessDenied - Access Denied" in caplog.text


def test_write_report_json(tmp_path):
    """Test the JSON report is written with counts and names."""
    path = tmp_path / "reports" / "prune.json"

    write_report_json(_report(), path)

    payload = json.loads(path.read_text())
    assert_equal(payload, build_report_payload(_report()))
    assert_equal(payload["deleted"], ["static/js/old.js"])
    assert_equal(payload["failures"], [{"name": "static/css/old.css", "reason": "AccessDenied - Access Denied"}])
    assert_equal(payload["orphans"], ["static/css/old.css", "static/js/old.js"])
