"""Unit tests for the config module."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from attachment_migrator.core.config import (
    REQUIRED_ENV_VARS,
    MigrationConfig,
    SupabaseProject,
    load_config,
)
from attachment_migrator.exceptions import ConfigError


class TestFromEnv:
    """Tests for MigrationConfig.from_env()."""

    def test_defaults(self, env_vars):
        config = MigrationConfig.from_env(env_vars)

        assert config.bucket_name == "app_private"
        assert config.batch_size == 10
        assert config.attachments_table == "clinical_attachments"
        assert config.request_timeout == 60.0
        assert config.legacy_prefixes == ("files", "consent_forms")

    def test_projects(self, env_vars):
        config = MigrationConfig.from_env(env_vars)

        assert config.production.url == "https://prod.supabase.co"
        assert config.production.service_role_key == "prod-key"
        assert config.migration.url == "https://migration.supabase.co"
        assert config.migration.service_role_key == "migration-key"

    def test_overrides(self, env_vars):
        env_vars.update(
            {
                "BUCKET_NAME": "other_bucket",
                "BATCH_SIZE": "25",
                "ATTACHMENTS_TABLE": "attachments",
                "REQUEST_TIMEOUT": "12.5",
            }
        )
        config = MigrationConfig.from_env(env_vars)

        assert config.bucket_name == "other_bucket"
        assert config.batch_size == 25
        assert config.attachments_table == "attachments"
        assert config.request_timeout == 12.5

    def test_blank_optional_values_use_defaults(self, env_vars):
        env_vars.update({"BUCKET_NAME": "", "BATCH_SIZE": "  "})
        config = MigrationConfig.from_env(env_vars)

        assert config.bucket_name == "app_private"
        assert config.batch_size == 10

    @pytest.mark.parametrize("name", REQUIRED_ENV_VARS)
    def test_missing_required_variable(self, env_vars, name):
        del env_vars[name]
        with pytest.raises(ConfigError, match=name):
            MigrationConfig.from_env(env_vars)

    def test_empty_required_variable_counts_as_missing(self, env_vars):
        env_vars["PROD_SUPABASE_URL"] = ""
        with pytest.raises(ConfigError, match="PROD_SUPABASE_URL"):
            MigrationConfig.from_env(env_vars)

    def test_lists_every_missing_variable(self):
        with pytest.raises(ConfigError) as excinfo:
            MigrationConfig.from_env({})
        for name in REQUIRED_ENV_VARS:
            assert name in str(excinfo.value)

    @pytest.mark.parametrize("value", ["ten", "2.5"])
    def test_non_integer_batch_size(self, env_vars, value):
        env_vars["BATCH_SIZE"] = value
        with pytest.raises(ConfigError, match="BATCH_SIZE must be an integer"):
            MigrationConfig.from_env(env_vars)

    @pytest.mark.parametrize("value", ["0", "-3"])
    def test_non_positive_batch_size(self, env_vars, value):
        env_vars["BATCH_SIZE"] = value
        with pytest.raises(ConfigError, match="BATCH_SIZE must be at least 1"):
            MigrationConfig.from_env(env_vars)

    @pytest.mark.parametrize("value", ["0", "-5", "nan", "inf", "-inf"])
    def test_invalid_timeout(self, env_vars, value):
        env_vars["REQUEST_TIMEOUT"] = value
        with pytest.raises(ConfigError, match="REQUEST_TIMEOUT must be a positive finite number"):
            MigrationConfig.from_env(env_vars)


class TestSupabaseProject:
    def test_strips_trailing_slash(self):
        project = SupabaseProject("https://prod.supabase.co/", "key")
        assert project.url == "https://prod.supabase.co"

    def test_key_not_in_repr(self):
        project = SupabaseProject("https://prod.supabase.co", "super-secret")
        assert "super-secret" not in repr(project)


class TestLoadConfig:
    """Tests for load_config()."""

    def test_reads_env_file(self, tmp_path: Path, env_vars):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "\n".join(f"{k}={v}" for k, v in env_vars.items()) + "\nBATCH_SIZE=5\n"
        )

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(env_file)

        assert config.production.url == "https://prod.supabase.co"
        assert config.batch_size == 5

    def test_process_environment_wins_over_env_file(self, tmp_path: Path, env_vars):
        env_file = tmp_path / ".env"
        env_file.write_text("BUCKET_NAME=from_file\n")

        with patch.dict(os.environ, {**env_vars, "BUCKET_NAME": "from_env"}, clear=True):
            config = load_config(env_file)

        assert config.bucket_name == "from_env"

    def test_missing_env_file_uses_environment(self, tmp_path: Path, env_vars):
        with patch.dict(os.environ, env_vars, clear=True):
            config = load_config(tmp_path / "missing.env")

        assert config.migration.url == "https://migration.supabase.co"

    def test_missing_configuration_raises(self, tmp_path: Path):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigError, match="Missing required environment variables"):
                load_config(tmp_path / "missing.env")
