"""Custom exception hierarchy for the clinical attachment migrator."""

from __future__ import annotations


class MigratorError(Exception):
    """Base exception for all migration-related errors."""


class ConfigError(MigratorError):
    """Raised when configuration is invalid or missing."""


class SupabaseError(MigratorError):
    """Raised when a Supabase API call fails.

    Carries the HTTP status code when the failure came from a response
    rather than from the transport.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FetchError(SupabaseError):
    """Raised when the attachment metadata cannot be fetched."""


class QueryError(SupabaseError):
    """Raised when the storage object index cannot be queried."""


class TransferError(SupabaseError):
    """Raised when a storage transfer (copy) operation fails."""


class ConnectionCheckError(MigratorError):
    """Raised when the pre-flight connection checks fail."""
