#!/usr/bin/env python3
"""
Command-line interface for the clinical attachment migrator.

Importing the subcommand modules registers them on the shared ``cli`` group.
"""

from attachment_migrator.cli.check_cmd import check_connection
from attachment_migrator.cli.common import cli, handle_exception
from attachment_migrator.cli.migrate_cmd import MigrationOrchestrator, migrate
from attachment_migrator.core.config import load_config
from attachment_migrator.utils.permissions import validate_connections

__all__ = [
    "MigrationOrchestrator",
    "check_connection",
    "cli",
    "handle_exception",
    "load_config",
    "main",
    "migrate",
    "validate_connections",
]


def main() -> None:
    """Main entry point for the clinical attachment migrator."""
    cli()


if __name__ == "__main__":
    main()
