"""
Settings Management

Pydantic-based settings schema with environment variable support.
Integrates with the bundled TOML defaults and provides type-safe access.

@.architecture
Incoming: utils/config.py, Environment variables, storage.toml, api/dependencies.py --- {Dict from load_toml_config, str from os.getenv, TOML config dict, get_settings calls}
Processing: get_settings(), reload_settings(), StorageSettings.resolve_app_data_dir(), field_validator() --- {4 jobs: configuration_loading, environment_variable_merging, schema_validation, caching}
Outgoing: api/dependencies.py, app.py, core/storage/service.py --- {Settings Pydantic model with typed config sections}
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from platformdirs import user_data_dir
from pydantic import BaseModel, Field, field_validator

from utils.config import load_config as load_toml_config


# =============================================================================
# Settings Schemas
# =============================================================================

class SecuritySettings(BaseModel):
    """Network binding and CORS configuration."""
    bind_host: str = "127.0.0.1"
    bind_port: int = 8765
    allowed_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://127.0.0.1",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])


class MonitoringSettings(BaseModel):
    """Logging configuration."""
    log_level: str = "INFO"
    log_format: str = "text"  # json|text
    log_file: Optional[Path] = None


class StorageSettings(BaseModel):
    """
    Storage lifecycle settings.

    app_data_dir overrides the platform application-data directory. It holds
    the storage config file and the cache directories, and is the default
    data root when no base path has been configured.
    """
    app_name: str = "storage-lifecycle"
    app_data_dir: Optional[Path] = None
    config_filename: str = "storage-config.json"
    export_prefix: str = "storage-data"
    backup_prefix: str = "storage-backup"
    cache_dir_names: List[str] = Field(
        default_factory=lambda: ["Cache", "Code Cache", "GPUCache"]
    )
    default_auto_clean_days: int = Field(default=30, ge=1)
    auto_clean_interval_hours: float = Field(default=24.0, gt=0)

    @field_validator('cache_dir_names')
    @classmethod
    def validate_cache_dir_names(cls, v: List[str]) -> List[str]:
        """Cache directories must be plain names under the app-data dir."""
        if not v:
            raise ValueError("At least one cache directory is required")
        for name in v:
            if not name or Path(name).name != name:
                raise ValueError(f"Invalid cache directory name: {name!r}")
        return v

    def resolve_app_data_dir(self) -> Path:
        """Return the application-data directory (override or platform default)."""
        if self.app_data_dir:
            return Path(os.path.abspath(Path(self.app_data_dir).expanduser()))
        return Path(user_data_dir(self.app_name, appauthor=False))

    @property
    def auto_clean_interval_seconds(self) -> float:
        return self.auto_clean_interval_hours * 60 * 60


class Settings(BaseModel):
    """
    Main application settings.

    Loads configuration from:
    1. TOML config file (storage.toml)
    2. Environment variables
    3. Defaults defined in schemas

    Priority: Environment variables > TOML config > Defaults
    """

    app_name: str = "Storage Lifecycle Backend"
    app_version: str = "1.0.0"
    environment: str = "development"  # development|production|test

    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @property
    def base_url(self) -> str:
        """Backend self-reference URL."""
        return f"http://{self.security.bind_host}:{self.security.bind_port}"

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ['development', 'production', 'test']
        if v not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v


# =============================================================================
# Settings Loader
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Load and return application settings (cached).

    Merges configuration from:
    1. TOML config file (via utils.config)
    2. Environment variables
    3. Default values

    Returns:
        Settings: Complete application settings
    """
    toml_config = load_toml_config()

    storage_settings = dict(toml_config.get("STORAGE", {}))
    security_settings = dict(toml_config.get("SERVER", {}))
    monitoring_settings = dict(toml_config.get("MONITORING", {}))

    # Environment overrides
    if app_name := os.getenv("STORAGE_APP_NAME"):
        storage_settings["app_name"] = app_name
    if app_data_dir := os.getenv("STORAGE_APP_DATA_DIR"):
        storage_settings["app_data_dir"] = app_data_dir
    if interval := os.getenv("STORAGE_AUTO_CLEAN_INTERVAL_HOURS"):
        storage_settings["auto_clean_interval_hours"] = interval

    if bind_host := os.getenv("SECURITY_BIND_HOST"):
        security_settings["bind_host"] = bind_host
    if bind_port := os.getenv("SECURITY_BIND_PORT"):
        security_settings["bind_port"] = bind_port

    if log_level := os.getenv("MONITORING_LOG_LEVEL"):
        monitoring_settings["log_level"] = log_level
    if log_format := os.getenv("MONITORING_LOG_FORMAT"):
        monitoring_settings["log_format"] = log_format
    if log_file := os.getenv("MONITORING_LOG_FILE"):
        monitoring_settings["log_file"] = log_file

    return Settings(
        environment=os.getenv("BACKEND_ENVIRONMENT", "development"),
        security=SecuritySettings(**security_settings),
        monitoring=MonitoringSettings(**monitoring_settings),
        storage=StorageSettings(**storage_settings),
    )


def reload_settings() -> Settings:
    """
    Reload settings (clears cache).

    Use this when settings need to be refreshed (e.g., after env changes in tests).

    Returns:
        Settings: Reloaded application settings
    """
    get_settings.cache_clear()
    return get_settings()

