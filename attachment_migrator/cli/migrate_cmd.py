"""CLI command handler for the migrate workflow."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from types import SimpleNamespace

import click

from attachment_migrator.cli.common import cli, common_options, handle_exception
from attachment_migrator.cli.report import create_output_directory, write_report
from attachment_migrator.constants import DEFAULT_LOG_DIR
from attachment_migrator.core.config import MigrationConfig, load_config
from attachment_migrator.core.migration_logging import log_run_summary
from attachment_migrator.core.migrator import AttachmentMigrator
from attachment_migrator.core.state import RunSummary
from attachment_migrator.services.supabase_adapter import SupabaseAdapter
from attachment_migrator.utils.logging import log_with_context, setup_logger
from attachment_migrator.utils.permissions import validate_connections

# ---------------------------------------------------------------------------
# migrate subcommand
# ---------------------------------------------------------------------------


@cli.command()
@common_options
@click.option(
    "--dry_run",
    is_flag=True,
    default=False,
    help="Check which files are missing and where they would come from, without copying",
)
@click.option(
    "--skip_connection_check",
    is_flag=True,
    default=False,
    help="Skip the pre-flight Supabase connection checks (not recommended)",
)
@click.option(
    "--log_dir",
    default=DEFAULT_LOG_DIR,
    show_default=True,
    help="Directory under which a timestamped run directory is created",
)
@click.option(
    "--no_progress",
    is_flag=True,
    default=False,
    help="Disable the progress bar",
)
def migrate(
    env_file: str,
    verbose: bool,
    debug_api: bool,
    dry_run: bool,
    skip_connection_check: bool,
    log_dir: str,
    no_progress: bool,
) -> None:
    """Copy missing clinical attachments into production storage.

    Args:
        env_file: Path to a .env file with the Supabase settings.
        verbose: Enable verbose console logging.
        debug_api: Enable detailed API request/response logging.
        dry_run: Report what would be copied without copying.
        skip_connection_check: Skip the pre-flight connection checks.
        log_dir: Parent directory for run logs and the report.
        no_progress: Disable the progress bar.
    """
    args = SimpleNamespace(
        env_file=env_file,
        verbose=verbose,
        debug_api=debug_api,
        dry_run=dry_run,
        skip_connection_check=skip_connection_check,
        log_dir=log_dir,
        no_progress=no_progress,
    )

    # Create output directory early so all operations are logged to file
    output_dir = create_output_directory(args.log_dir)
    setup_logger(args.verbose, args.debug_api, output_dir)

    log_with_context(logging.INFO, "Clinical Attachment Migrator Service started")
    log_startup_info(args)
    log_with_context(logging.INFO, f"Output directory: {output_dir}")

    orchestrator = MigrationOrchestrator(args)
    orchestrator.output_dir = output_dir

    try:
        orchestrator.validate_prerequisites()
        orchestrator.run_migration()
    except (Exception, KeyboardInterrupt) as e:
        handle_exception(e)
        sys.exit(1)
    finally:
        orchestrator.cleanup()

    log_with_context(logging.INFO, "Migration completed. Service finished.")


# ---------------------------------------------------------------------------
# MigrationOrchestrator
# ---------------------------------------------------------------------------


class MigrationOrchestrator:
    """Orchestrates the migration process with validation and error handling."""

    def __init__(self, args: SimpleNamespace) -> None:
        self.args = args
        self.config: MigrationConfig | None = None
        self.production: SupabaseAdapter | None = None
        self.migration: SupabaseAdapter | None = None
        self.output_dir: str | None = None
        self.summary: RunSummary | None = None

    def validate_prerequisites(self) -> None:
        """Load configuration, connect to both projects and check access.

        Raises:
            ConfigError: If required configuration is missing or invalid.
            ConnectionCheckError: If a connection check fails.
        """
        self.config = load_config(Path(self.args.env_file))
        self.production = SupabaseAdapter(
            self.config.production,
            self.config.request_timeout,
            pool_size=self.config.batch_size,
        )
        self.migration = SupabaseAdapter(
            self.config.migration, self.config.request_timeout
        )

        if self.args.skip_connection_check:
            log_with_context(
                logging.WARNING,
                "Connection checks skipped. This may cause issues during migration.",
            )
            return

        validate_connections(self.config, self.production, self.migration)

    def create_migrator(self) -> AttachmentMigrator:
        """Create a migrator bound to the production project."""
        if self.config is None or self.production is None:
            raise RuntimeError("validate_prerequisites() must run first")
        return AttachmentMigrator(
            self.config,
            self.production,
            dry_run=self.args.dry_run,
            show_progress=not self.args.no_progress,
        )

    def run_migration(self) -> RunSummary:
        """Execute the migration and report its outcome."""
        migrator = self.create_migrator()
        self.summary = asyncio.run(migrator.run())

        log_run_summary(self.summary)
        if self.output_dir:
            write_report(self.summary, self.output_dir, migrator.config.bucket_name)
        return self.summary

    def cleanup(self) -> None:
        """Release HTTP sessions."""
        for adapter in (self.production, self.migration):
            if adapter is not None:
                adapter.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def log_startup_info(args: SimpleNamespace) -> None:
    """Log startup information.

    Args:
        args: Parsed CLI arguments.
    """
    env_path = Path(args.env_file)
    if not env_path.is_absolute():
        env_path = Path.cwd() / args.env_file

    log_with_context(logging.INFO, "Starting migration with the following parameters:")
    log_with_context(logging.INFO, f"- Env file: {env_path}")
    log_with_context(logging.INFO, f"- Dry run: {args.dry_run}")
    log_with_context(logging.INFO, f"- Verbose logging: {args.verbose}")
    log_with_context(logging.INFO, f"- Debug API calls: {args.debug_api}")
