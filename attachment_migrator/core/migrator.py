"""
Main migrator class for the clinical attachment migrator.

Reads every clinical attachment record, checks whether its file is already in
the production bucket, and copies missing files in from the legacy folders.
Records are reconciled concurrently within a batch; batches run one after
another.
"""

from __future__ import annotations

import asyncio
import logging
import time
import traceback
from typing import Iterator, Sequence

from tqdm import tqdm

from attachment_migrator.core.config import MigrationConfig
from attachment_migrator.core.state import RunSummary
from attachment_migrator.exceptions import FetchError, QueryError, TransferError
from attachment_migrator.services.supabase_adapter import SupabaseAdapter
from attachment_migrator.types import (
    AttachmentRecord,
    ReconcileOutcome,
    ReconcileResult,
)
from attachment_migrator.utils.keys import legacy_candidates, normalize_key
from attachment_migrator.utils.logging import log_with_context


def chunked(
    records: Sequence[AttachmentRecord], size: int
) -> Iterator[Sequence[AttachmentRecord]]:
    """Yield consecutive slices of ``records`` holding at most ``size`` items."""
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}")
    for start in range(0, len(records), size):
        yield records[start : start + size]


class AttachmentMigrator:
    """Reconciles clinical attachments into the production storage bucket."""

    def __init__(
        self,
        config: MigrationConfig,
        production: SupabaseAdapter,
        dry_run: bool = False,
        show_progress: bool = True,
    ) -> None:
        self.config = config
        self.production = production
        self.dry_run = dry_run
        self.show_progress = show_progress

    @property
    def log_prefix(self) -> str:
        return "[DRY RUN] " if self.dry_run else ""

    async def run(self) -> RunSummary:
        """Reconcile every attachment record.

        Returns:
            RunSummary with one result per record.

        Raises:
            FetchError: If the attachment records cannot be fetched. No
                transfer is attempted in that case.
        """
        started = time.monotonic()
        log_with_context(
            logging.INFO,
            f"{self.log_prefix}Starting migration of clinical attachments...",
        )

        try:
            records = await asyncio.to_thread(
                self.production.list_attachments, self.config.attachments_table
            )
        except FetchError as e:
            log_with_context(
                logging.ERROR,
                f"Error fetching attachments: {e}",
                table=self.config.attachments_table,
            )
            raise

        total_batches = -(-len(records) // self.config.batch_size)
        log_with_context(
            logging.INFO,
            f"Found {len(records)} attachments to process in {total_batches} batches.",
            count=len(records),
        )

        summary = RunSummary(total_records=len(records), dry_run=self.dry_run)
        with tqdm(
            total=len(records),
            desc="Reconciling attachments",
            unit="file",
            # None lets tqdm hide the bar when stderr is not a terminal
            disable=None if self.show_progress else True,
        ) as pbar:
            for number, batch in enumerate(
                chunked(records, self.config.batch_size), start=1
            ):
                log_with_context(
                    logging.INFO,
                    f"Processing batch {number} of {total_batches}",
                    batch=number,
                )
                results = await asyncio.gather(
                    *(self._reconcile_guarded(record) for record in batch)
                )
                summary.record_batch(list(results))
                pbar.update(len(batch))

        summary.duration = time.monotonic() - started
        log_with_context(
            logging.INFO,
            f"{self.log_prefix}Migration cycle completed successfully.",
            outcome="complete",
        )
        return summary

    async def _reconcile_guarded(self, record: AttachmentRecord) -> ReconcileResult:
        """Reconcile one record, turning any unexpected failure into a result."""
        file_key = str(record.get("fileKey") or "")
        try:
            return await self.reconcile_one(record)
        except Exception as e:
            log_with_context(
                logging.ERROR,
                f"Unexpected error migrating {file_key or '<missing fileKey>'}: {e}",
                file_key=file_key,
            )
            log_with_context(logging.DEBUG, traceback.format_exc(), file_key=file_key)
            return ReconcileResult(file_key, ReconcileOutcome.ERROR, reason=str(e))

    async def reconcile_one(self, record: AttachmentRecord) -> ReconcileResult:
        """Make sure one attachment's file is present in production storage.

        The storage index is checked first; a file that is already present is
        left alone. Otherwise each legacy folder is tried in order and the
        first successful copy wins.

        Args:
            record: The attachment record; only ``fileKey`` is used.

        Returns:
            The ReconcileResult for the record.
        """
        file_key = record.get("fileKey")
        if not isinstance(file_key, str) or not file_key:
            log_with_context(
                logging.ERROR, f"Attachment record has no fileKey, skipping: {record}"
            )
            return ReconcileResult("", ReconcileOutcome.ERROR, reason="missing fileKey")

        try:
            key = normalize_key(file_key)
            candidates = legacy_candidates(key, self.config.legacy_prefixes)
        except ValueError as e:
            log_with_context(logging.ERROR, str(e), file_key=file_key)
            return ReconcileResult(file_key, ReconcileOutcome.ERROR, reason=str(e))

        bucket = self.config.bucket_name
        try:
            existing = await asyncio.to_thread(
                self.production.find_objects, bucket, key.without_separator
            )
        except QueryError as e:
            log_with_context(
                logging.ERROR,
                f"Error checking file in production storage: {e.message}",
                file_key=file_key,
            )
            return ReconcileResult(file_key, ReconcileOutcome.ERROR, reason=e.message)

        if existing:
            log_with_context(
                logging.INFO,
                f"File already exists in production storage: {key.with_separator}",
                file_key=file_key,
            )
            return ReconcileResult(file_key, ReconcileOutcome.ALREADY_PRESENT)

        for index, candidate in enumerate(candidates):
            if await self._transfer(candidate, key.without_separator, file_key):
                log_with_context(
                    logging.INFO,
                    f"{self.log_prefix}Successfully copied file to production storage: "
                    f"{key.with_separator} (from {candidate})",
                    file_key=file_key,
                )
                return ReconcileResult(
                    file_key, ReconcileOutcome.MIGRATED, source_path=candidate
                )
            if index + 1 < len(candidates):
                log_with_context(
                    logging.WARNING,
                    f"File not found in migration storage: {candidate}, "
                    f"trying {candidates[index + 1]}",
                    file_key=file_key,
                )

        log_with_context(
            logging.WARNING,
            f"File not found in any legacy location ({', '.join(candidates)}), skipping",
            file_key=file_key,
        )
        return ReconcileResult(file_key, ReconcileOutcome.NOT_FOUND)

    async def _transfer(self, source_path: str, dest_path: str, file_key: str) -> bool:
        """Copy ``source_path`` to ``dest_path``; return whether it succeeded.

        In dry-run mode nothing is copied: the storage index is asked whether
        the source exists instead.
        """
        bucket = self.config.bucket_name
        if self.dry_run:
            try:
                found = await asyncio.to_thread(
                    self.production.find_objects, bucket, source_path
                )
            except QueryError as e:
                log_with_context(
                    logging.WARNING,
                    f"{self.log_prefix}Could not look up {source_path}: {e.message}",
                    file_key=file_key,
                )
                return False
            return bool(found)

        try:
            await asyncio.to_thread(
                self.production.copy_within_bucket, bucket, source_path, dest_path
            )
        except TransferError as e:
            log_with_context(
                logging.DEBUG,
                f"Copy from {source_path} failed: {e.message}",
                file_key=file_key,
            )
            return False
        return True
