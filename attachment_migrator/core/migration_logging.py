"""
End-of-run summary logging for the clinical attachment migrator.

Kept apart from ``migrator.py`` so the runner stays focused on control flow.
"""

from __future__ import annotations

import logging

from attachment_migrator.core.state import RunSummary
from attachment_migrator.types import ReconcileOutcome
from attachment_migrator.utils.logging import log_with_context

# Upper bound on per-record lines echoed in the summary; the report has all
MAX_LISTED_RECORDS = 50


def log_run_summary(summary: RunSummary) -> None:
    """Log final run statistics and the records that need attention.

    Each line carries its statistic as structured kwargs so it can be
    filtered in the log file while staying readable on the console.

    Args:
        summary: The RunSummary returned by ``AttachmentMigrator.run``.
    """
    counts = summary.counts
    prefix = "[DRY RUN] " if summary.dry_run else ""

    if summary.total_records == 0:
        log_with_context(
            logging.WARNING,
            f"{prefix}NO ATTACHMENT RECORDS FOUND - NOTHING TO MIGRATE",
            outcome="no_work",
        )
    else:
        log_with_context(
            logging.INFO,
            f"{prefix}ATTACHMENT MIGRATION COMPLETED",
            outcome="dry_run_complete" if summary.dry_run else "success",
        )

    log_with_context(
        logging.INFO,
        f"Duration: {summary.duration / 60:.1f} minutes ({summary.duration:.1f} seconds)",
        duration_seconds=summary.duration,
    )
    log_with_context(
        logging.INFO,
        f"Attachments processed: {summary.processed} of {summary.total_records} "
        f"in {len(summary.batch_sizes)} batches",
        stat="processed",
        count=summary.processed,
    )
    migrated_label = "Would be migrated" if summary.dry_run else "Migrated"
    labels = {
        ReconcileOutcome.ALREADY_PRESENT: "Already present",
        ReconcileOutcome.MIGRATED: migrated_label,
        ReconcileOutcome.NOT_FOUND: "Not found in legacy locations",
        ReconcileOutcome.ERROR: "Errors",
    }
    for outcome, label in labels.items():
        level = (
            logging.WARNING
            if outcome in (ReconcileOutcome.NOT_FOUND, ReconcileOutcome.ERROR)
            and counts[outcome]
            else logging.INFO
        )
        log_with_context(
            level,
            f"{label}: {counts[outcome]}",
            stat=outcome.value,
            count=counts[outcome],
        )

    attention = summary.needs_attention
    if not attention:
        log_with_context(logging.INFO, "No issues detected")
        return

    log_with_context(
        logging.WARNING, f"{len(attention)} attachment(s) need attention:"
    )
    for result in attention[:MAX_LISTED_RECORDS]:
        detail = f" ({result.reason})" if result.reason else ""
        log_with_context(
            logging.WARNING,
            f"  - {result.file_key or '<missing fileKey>'}: {result.outcome.value}{detail}",
            file_key=result.file_key,
        )
    if len(attention) > MAX_LISTED_RECORDS:
        log_with_context(
            logging.WARNING,
            f"  ... and {len(attention) - MAX_LISTED_RECORDS} more, see the migration report",
        )
