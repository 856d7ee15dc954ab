"""Shared test fixtures for the attachment_migrator test suite."""

import pytest

from attachment_migrator.core.config import MigrationConfig, SupabaseProject


@pytest.fixture()
def env_vars():
    """Return a complete set of environment variables."""
    return {
        "MIGRATION_SUPABASE_URL": "https://migration.supabase.co",
        "MIGRATION_SUPABASE_SERVICE_ROLE_KEY": "migration-key",
        "PROD_SUPABASE_URL": "https://prod.supabase.co",
        "PROD_SUPABASE_SERVICE_ROLE_KEY": "prod-key",
    }


@pytest.fixture()
def config():
    """Return a MigrationConfig with default settings."""
    return MigrationConfig(
        migration=SupabaseProject("https://migration.supabase.co", "migration-key"),
        production=SupabaseProject("https://prod.supabase.co", "prod-key"),
    )


@pytest.fixture()
def sample_records():
    """Return attachment rows as PostgREST would return them."""
    return [
        {"id": "a1", "fileKey": "clinical/photo1.png"},
        {"id": "a2", "fileKey": "/clinical/scan.pdf"},
        {"id": "a3", "fileKey": "consents/form.pdf"},
    ]
