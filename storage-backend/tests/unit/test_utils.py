"""
Unit Tests: Configuration

Tests for TOML loading and the settings layer.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.settings import StorageSettings, reload_settings
from utils.config import get_fallback_config, load_config


class TestConfigLoader:
    """Test utils.config."""

    def test_load_bundled_config(self):
        config = load_config()

        assert config["STORAGE"]["config_filename"] == "storage-config.json"
        assert config["STORAGE"]["cache_dir_names"] == ["Cache", "Code Cache", "GPUCache"]
        assert config["SERVER"]["bind_port"] == 8765

    def test_missing_file_uses_fallback(self, temp_dir):
        assert load_config(temp_dir / "missing.toml") == get_fallback_config()

    def test_invalid_toml_uses_fallback(self, temp_dir):
        path = temp_dir / "broken.toml"
        path.write_text("[STORAGE\napp_name = ")

        assert load_config(path) == get_fallback_config()


class TestSettings:
    """Test config.settings."""

    def test_environment_overrides(self, monkeypatch, temp_dir):
        monkeypatch.setenv("STORAGE_APP_DATA_DIR", str(temp_dir / "data"))
        monkeypatch.setenv("STORAGE_AUTO_CLEAN_INTERVAL_HOURS", "6")
        monkeypatch.setenv("SECURITY_BIND_PORT", "9001")
        monkeypatch.setenv("MONITORING_LOG_LEVEL", "DEBUG")

        settings = reload_settings()

        assert settings.environment == "test"
        assert settings.storage.resolve_app_data_dir() == temp_dir / "data"
        assert settings.storage.auto_clean_interval_seconds == 6 * 60 * 60
        assert settings.security.bind_port == 9001
        assert settings.monitoring.log_level == "DEBUG"
        assert settings.base_url == "http://127.0.0.1:9001"

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("BACKEND_ENVIRONMENT", "staging")

        with pytest.raises(ValidationError):
            reload_settings()

    def test_default_app_data_dir_uses_platformdirs(self):
        settings = StorageSettings(app_name="storage-lifecycle-test")

        resolved = settings.resolve_app_data_dir()

        assert resolved.is_absolute()
        assert "storage-lifecycle-test" in resolved.parts

    def test_app_data_dir_expands_user(self):
        settings = StorageSettings(app_data_dir="~/storage-data")

        assert settings.resolve_app_data_dir() == Path.home() / "storage-data"

    @pytest.mark.parametrize("names", [[], ["Cache", "../escape"], [""]])
    def test_invalid_cache_dir_names(self, names):
        with pytest.raises(ValidationError):
            StorageSettings(cache_dir_names=names)

    def test_auto_clean_days_must_be_positive(self):
        with pytest.raises(ValidationError):
            StorageSettings(default_auto_clean_days=0)
