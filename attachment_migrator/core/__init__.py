"""Core migration logic including configuration and orchestration."""

__all__ = [
    "config",
    "migration_logging",
    "migrator",
    "state",
]
