"""Shared CLI infrastructure: option decorators, error handlers, and the CLI group."""

from __future__ import annotations

import logging
import traceback
from typing import Callable, ClassVar

import click

import attachment_migrator
from attachment_migrator.constants import DEFAULT_ENV_FILE
from attachment_migrator.exceptions import (
    ConfigError,
    ConnectionCheckError,
    FetchError,
    MigratorError,
)
from attachment_migrator.utils.logging import log_with_context

# ---------------------------------------------------------------------------
# Custom click.Group that defaults to ``migrate``.
# The job is normally started bare (``attachment-migrator``) by a process
# supervisor, so no arguments, or a first token that is a flag, means
# ``migrate``.
# ---------------------------------------------------------------------------


class DefaultGroup(click.Group):
    """Click group that defaults to the ``migrate`` subcommand."""

    # Flags that belong to the group itself and should NOT trigger the
    # ``migrate`` default.
    _GROUP_FLAGS: ClassVar[set[str]] = {"--help", "--version", "-h"}

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        """Prepend ``migrate`` when no subcommand was named.

        Args:
            ctx: The current Click context.
            args: Raw CLI argument list.

        Returns:
            The (possibly modified) argument list for further parsing.
        """
        if not args or (args[0].startswith("-") and args[0] not in self._GROUP_FLAGS):
            args = ["migrate", *args]
        return super().parse_args(ctx, args)


# ---------------------------------------------------------------------------
# Shared option decorator
# ---------------------------------------------------------------------------


def common_options(f: Callable[..., None]) -> Callable[..., None]:
    """Decorator that adds options shared across subcommands.

    Args:
        f: The Click command function to decorate.

    Returns:
        The decorated function with common options attached.
    """
    f = click.option(
        "--env_file",
        default=DEFAULT_ENV_FILE,
        show_default=True,
        help="Path to a .env file with the Supabase settings",
    )(f)
    f = click.option(
        "--verbose",
        "-v",
        is_flag=True,
        default=False,
        help="Enable verbose console logging (shows DEBUG level messages)",
    )(f)
    f = click.option(
        "--debug_api",
        is_flag=True,
        default=False,
        help="Log every Supabase API request and response (creates large log files)",
    )(f)
    return f


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group(
    cls=DefaultGroup,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(
    version=attachment_migrator.__version__, prog_name="attachment-migrator"
)
def cli() -> None:
    """Clinical attachment migrator.

    Copies clinical attachment files missing from the production storage
    bucket in from the legacy storage folders.
    """


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


def handle_exception(e: BaseException) -> None:
    """Log a fatal error with guidance for the operator.

    Args:
        e: The exception that aborted the command.
    """
    if isinstance(e, ConfigError):
        log_with_context(logging.ERROR, f"Configuration error: {e}")
        log_with_context(
            logging.INFO,
            "Set the required variables in the environment or in your .env file.",
        )
    elif isinstance(e, ConnectionCheckError):
        log_with_context(logging.ERROR, str(e))
        log_with_context(
            logging.INFO,
            "Fix the connection issues or run with --skip_connection_check if you're sure.",
        )
    elif isinstance(e, FetchError):
        log_with_context(logging.ERROR, f"Migration failed: {e}")
        log_with_context(
            logging.INFO, "No attachments were processed. Please try again later."
        )
    elif isinstance(e, MigratorError):
        log_with_context(logging.ERROR, str(e))
    elif isinstance(e, KeyboardInterrupt):
        log_with_context(logging.WARNING, "Migration interrupted by user.")
        log_with_context(
            logging.INFO,
            "Completed copies are kept; running again skips files already present.",
        )
    else:
        log_with_context(logging.ERROR, f"Migration failed: {e}")
        log_with_context(
            logging.DEBUG,
            "".join(traceback.format_exception(type(e), e, e.__traceback__)),
        )
