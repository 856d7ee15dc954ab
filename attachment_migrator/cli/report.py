"""
Report generation for the clinical attachment migrator
"""

from __future__ import annotations

import datetime
import logging
import os

import yaml

from attachment_migrator.constants import REPORT_FILENAME
from attachment_migrator.core.state import RunSummary
from attachment_migrator.utils.logging import log_with_context


def create_output_directory(log_dir: str) -> str:
    """Create a timestamped directory for this run's logs and report.

    Args:
        log_dir: Parent directory for all runs.

    Returns:
        The path to the newly created run directory.
    """
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    run_output_dir = os.path.join(log_dir, f"run_{timestamp}")
    os.makedirs(run_output_dir, exist_ok=True)
    return run_output_dir


def build_report(summary: RunSummary, bucket_name: str) -> dict:
    """Build the serialisable report for a run."""
    return {
        "migration_summary": {
            "timestamp": datetime.datetime.now().isoformat(),
            "dry_run": summary.dry_run,
            "bucket": bucket_name,
            "duration_seconds": round(summary.duration, 2),
            "total_records": summary.total_records,
            "batches": len(summary.batch_sizes),
            "outcomes": {
                outcome.value: count for outcome, count in summary.counts.items()
            },
        },
        "needs_attention": [result.to_dict() for result in summary.needs_attention],
        "migrated": [
            result.to_dict()
            for result in summary.results
            if result.source_path is not None
        ],
    }


def write_report(
    summary: RunSummary, output_dir: str, bucket_name: str
) -> str | None:
    """Write ``migration_report.yaml`` for a run.

    Args:
        summary: The finished run's summary.
        output_dir: The run's output directory.
        bucket_name: Production bucket the run targeted.

    Returns:
        The report path, or None if it could not be written.
    """
    report_path = os.path.join(output_dir, REPORT_FILENAME)
    try:
        with open(report_path, "w") as f:
            yaml.safe_dump(
                build_report(summary, bucket_name),
                f,
                default_flow_style=False,
                sort_keys=False,
            )
    except OSError as e:
        log_with_context(logging.ERROR, f"Failed to write migration report: {e}")
        return None

    log_with_context(logging.INFO, f"Migration report saved to {report_path}")
    return report_path
