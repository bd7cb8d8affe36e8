"""
Summary output and JSON run reports for artifact_prune.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from artifact_prune.runner import PruneReport


def format_summary_line(report: PruneReport) -> str:
    """Return the one-line run summary."""
    summary = report.summary
    if report.dry_run:
        return f"Dry run: {report.orphan_count} orphan(s) in {report.bucket} would be deleted"
    line = f"Prune complete: {summary.deleted_count} deleted, {summary.failed_count} failed"
    if summary.skipped_count:
        line += f" ({summary.skipped_count} skipped after cancellation)"
    return line


def print_summary(report: PruneReport) -> None:
    """Print the counts line and log every failed delete."""
    print(
        f"Compared {report.local_count:,} local file(s) with {report.remote_count:,} "
        f"remote object(s) in {report.bucket}: {report.orphan_count:,} orphan(s)"
    )
    if report.summary.failures:
        logging.error("Failed deletes:")
        for failure in sorted(report.summary.failures, key=lambda f: f.name):
            logging.error("  %s: %s", failure.name, failure.reason)
    print(format_summary_line(report))


def build_report_payload(report: PruneReport) -> dict:
    """Return the JSON-serializable report for a run."""
    payload = {
        "bucket": report.bucket,
        "dry_run": report.dry_run,
        "local_count": report.local_count,
        "remote_count": report.remote_count,
        "orphans": list(report.orphans),
    }
    payload.update(report.summary.as_dict())
    return payload


def write_report_json(report: PruneReport, json_path: Path) -> None:
    """Write the run report to json_path, creating parent directories."""
    json_path.parent.mkdir(parents=True, exist_ok=True)
    json_path.write_text(json.dumps(build_report_payload(report), indent=2))
    logging.info("Wrote run report to %s", json_path)
