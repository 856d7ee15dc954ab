"""CLI command handler for the standalone connection check."""

from __future__ import annotations

import sys
from pathlib import Path

from attachment_migrator.cli.common import cli, common_options, handle_exception
from attachment_migrator.core.config import load_config
from attachment_migrator.services.supabase_adapter import SupabaseAdapter
from attachment_migrator.utils.logging import setup_logger
from attachment_migrator.utils.permissions import validate_connections

# ---------------------------------------------------------------------------
# check-connection subcommand
# ---------------------------------------------------------------------------


@cli.command("check-connection")
@common_options
def check_connection(env_file: str, verbose: bool, debug_api: bool) -> None:
    """Validate Supabase access without running a migration.

    Args:
        env_file: Path to a .env file with the Supabase settings.
        verbose: Enable verbose console logging.
        debug_api: Enable detailed API request/response logging.
    """
    setup_logger(verbose, debug_api)

    adapters: list[SupabaseAdapter] = []
    try:
        config = load_config(Path(env_file))
        production = SupabaseAdapter(config.production, config.request_timeout)
        migration = SupabaseAdapter(config.migration, config.request_timeout)
        adapters.extend([production, migration])
        validate_connections(config, production, migration)
    except Exception as e:
        handle_exception(e)
        sys.exit(1)
    finally:
        for adapter in adapters:
            adapter.close()
