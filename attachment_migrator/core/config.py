"""
Configuration module for the clinical attachment migrator.

Configuration comes from the process environment, optionally seeded from a
``.env`` file. It is read once at startup into a frozen MigrationConfig that
is passed explicitly to every component that needs it.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from attachment_migrator.constants import (
    DEFAULT_ATTACHMENTS_TABLE,
    DEFAULT_BATCH_SIZE,
    DEFAULT_BUCKET_NAME,
    DEFAULT_REQUEST_TIMEOUT,
    LEGACY_PREFIXES,
)
from attachment_migrator.exceptions import ConfigError
from attachment_migrator.utils.logging import log_with_context

REQUIRED_ENV_VARS = (
    "MIGRATION_SUPABASE_URL",
    "MIGRATION_SUPABASE_SERVICE_ROLE_KEY",
    "PROD_SUPABASE_URL",
    "PROD_SUPABASE_SERVICE_ROLE_KEY",
)


@dataclass(frozen=True)
class SupabaseProject:
    """Endpoint and service-role credentials for one Supabase project."""

    url: str
    service_role_key: str = field(repr=False)

    def __post_init__(self) -> None:
        # Normalise so path joins never produce a double slash
        object.__setattr__(self, "url", self.url.rstrip("/"))


@dataclass(frozen=True)
class MigrationConfig:
    """Typed configuration for a migration run."""

    migration: SupabaseProject
    production: SupabaseProject

    bucket_name: str = DEFAULT_BUCKET_NAME
    batch_size: int = DEFAULT_BATCH_SIZE
    attachments_table: str = DEFAULT_ATTACHMENTS_TABLE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    legacy_prefixes: tuple[str, ...] = LEGACY_PREFIXES

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ConfigError(f"BATCH_SIZE must be at least 1, got {self.batch_size}")
        if not math.isfinite(self.request_timeout) or self.request_timeout <= 0:
            raise ConfigError(
                f"REQUEST_TIMEOUT must be a positive finite number, got {self.request_timeout}"
            )
        if not self.bucket_name:
            raise ConfigError("BUCKET_NAME must not be empty")

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> MigrationConfig:
        """Create a MigrationConfig from environment variables.

        Args:
            env: Mapping of environment variable names to values.

        Returns:
            The validated configuration.

        Raises:
            ConfigError: If a required variable is missing or a value is invalid.
        """
        missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
        if missing:
            raise ConfigError(
                "Missing required environment variables: "
                f"{', '.join(missing)}. Please check your .env file."
            )

        return cls(
            migration=SupabaseProject(
                url=env["MIGRATION_SUPABASE_URL"],
                service_role_key=env["MIGRATION_SUPABASE_SERVICE_ROLE_KEY"],
            ),
            production=SupabaseProject(
                url=env["PROD_SUPABASE_URL"],
                service_role_key=env["PROD_SUPABASE_SERVICE_ROLE_KEY"],
            ),
            bucket_name=env.get("BUCKET_NAME") or DEFAULT_BUCKET_NAME,
            batch_size=_parse_number(env, "BATCH_SIZE", int, DEFAULT_BATCH_SIZE),
            attachments_table=env.get("ATTACHMENTS_TABLE") or DEFAULT_ATTACHMENTS_TABLE,
            request_timeout=_parse_number(
                env, "REQUEST_TIMEOUT", float, DEFAULT_REQUEST_TIMEOUT
            ),
        )


def _parse_number(env: Mapping[str, str], name: str, kind: type, default):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw)
    except ValueError as e:
        expected = "an integer" if kind is int else "a number"
        raise ConfigError(f"{name} must be {expected}, got {raw!r}") from e


def load_config(env_file: Path | None = None) -> MigrationConfig:
    """
    Load configuration from the environment.

    Values from ``env_file`` are loaded first without overriding variables
    that are already set in the process environment. A missing env file is
    not an error; the environment alone may be complete.

    Args:
        env_file: Optional path to a dotenv file

    Returns:
        MigrationConfig built from the environment

    Raises:
        ConfigError: If required configuration is absent or invalid
    """
    if env_file is not None:
        if env_file.exists():
            load_dotenv(env_file, override=False)
            log_with_context(logging.INFO, f"Loaded environment from {env_file}")
        else:
            log_with_context(
                logging.DEBUG,
                f"Env file {env_file} not found, using process environment only",
            )

    config = MigrationConfig.from_env(os.environ)
    log_with_context(
        logging.DEBUG,
        f"Configuration: bucket={config.bucket_name}, batch_size={config.batch_size}, "
        f"table={config.attachments_table}, timeout={config.request_timeout}s",
    )
    return config
