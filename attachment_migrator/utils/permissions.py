"""
Pre-flight connection checks for the clinical attachment migrator.

Exercises every read the migration depends on against both Supabase
projects, so a bad URL, key, or bucket name fails fast before any record is
processed.
"""

from __future__ import annotations

import logging

from attachment_migrator.constants import STORAGE_OBJECTS_TABLE, STORAGE_SCHEMA
from attachment_migrator.core.config import MigrationConfig
from attachment_migrator.exceptions import ConnectionCheckError, SupabaseError
from attachment_migrator.services.supabase_adapter import SupabaseAdapter
from attachment_migrator.utils.logging import log_with_context


class ConnectionValidator:
    """
    Validates access to the production and migration Supabase projects.

    Every check runs even when an earlier one fails, so a single pass
    reports all configuration problems at once.
    """

    def __init__(
        self,
        config: MigrationConfig,
        production: SupabaseAdapter,
        migration: SupabaseAdapter,
    ):
        self.config = config
        self.production = production
        self.migration = migration
        self.errors: list[str] = []

    def validate_all(self) -> bool:
        """
        Run all connection checks.

        Returns:
            True when every check passed

        Raises:
            ConnectionCheckError: If any check failed
        """
        log_with_context(logging.INFO, "Checking Supabase connections...")
        self.errors = []

        self._check(
            f"read production table '{self.config.attachments_table}'",
            lambda: self.production.select_rows(
                self.config.attachments_table, limit=1
            ),
        )
        self._check(
            "read production storage index",
            lambda: self.production.select_rows(
                STORAGE_OBJECTS_TABLE,
                columns="id",
                schema=STORAGE_SCHEMA,
                filters={"bucket_id": f"eq.{self.config.bucket_name}"},
                limit=1,
            ),
        )
        self._check(
            f"find production bucket '{self.config.bucket_name}'",
            lambda: self.production.get_bucket(self.config.bucket_name),
        )
        self._check(
            "reach migration storage API",
            self.migration.list_buckets,
        )

        return self._report_results()

    def _check(self, description: str, probe) -> None:
        try:
            probe()
        except SupabaseError as e:
            self.errors.append(f"Could not {description}: {e}")
            log_with_context(logging.ERROR, f"❌ Could not {description}: {e}")
        else:
            log_with_context(logging.INFO, f"✅ Able to {description}")

    def _report_results(self) -> bool:
        if self.errors:
            log_with_context(
                logging.ERROR,
                "Check the Supabase URLs, service role keys and BUCKET_NAME in your .env file.",
            )
            raise ConnectionCheckError(
                f"Connection check failed with {len(self.errors)} error(s): "
                + "; ".join(self.errors)
            )

        log_with_context(logging.INFO, "All connection checks passed.")
        return True


def validate_connections(
    config: MigrationConfig,
    production: SupabaseAdapter,
    migration: SupabaseAdapter,
) -> bool:
    """
    Convenience function to run every connection check.

    Raises:
        ConnectionCheckError: If any check failed
    """
    return ConnectionValidator(config, production, migration).validate_all()
