"""
Config Store

Owns the in-memory StorageConfig record and its JSON file. One instance is
created by the storage service at startup and handed to every component that
needs the current configuration.

@.architecture
Incoming: core/storage/service.py, core/storage/migration.py, core/storage/cache.py --- {load/get/merge/save calls, partial config mappings}
Processing: load(), get(), merge(), save(), update() --- {4 jobs: config_loading, default_fallback, shallow_merge, best_effort_persistence}
Outgoing: Local filesystem (storage-config.json), core/storage/paths.py --- {indented JSON config file, StorageConfig snapshots}
"""

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from monitoring import get_logger

from .errors import Diagnostic, DiagnosticsSink, StorageErrorKind, log_diagnostic
from .models import StorageConfig

logger = get_logger(__name__)

# camelCase file keys -> model field names
_FIELD_NAMES = {
    info.alias: name for name, info in StorageConfig.model_fields.items() if info.alias
}


def _drop_invalid_fields(raw: Mapping[str, Any], error: ValidationError) -> Dict[str, Any]:
    """``raw`` without the keys, alias or field name, that failed validation."""
    invalid = {str(item["loc"][0]) for item in error.errors() if item["loc"]}
    invalid |= {_FIELD_NAMES.get(key, key) for key in invalid}
    return {
        key: value for key, value in raw.items()
        if key not in invalid and _FIELD_NAMES.get(key, key) not in invalid
    }


class ConfigStore:
    """
    Persisted StorageConfig.

    merge() always replaces the in-memory record; save() failures are sent
    to the diagnostics sink and never undo the in-memory change.
    """

    def __init__(self, config_path: Path, diagnostics: Optional[DiagnosticsSink] = None):
        self.config_path = Path(config_path)
        self._diagnostics = diagnostics or log_diagnostic
        self._config = StorageConfig()

    def load(self) -> StorageConfig:
        """Load the record from disk, falling back to defaults."""
        self._config = self._read()
        return self._config

    def _read(self) -> StorageConfig:
        if not self.config_path.exists():
            logger.debug(f"No storage config at {self.config_path}, using defaults")
            return StorageConfig()

        try:
            raw = json.loads(self.config_path.read_text(encoding='utf-8'))
            if not isinstance(raw, dict):
                raise ValueError("storage config must be a JSON object")
            try:
                return StorageConfig.model_validate(raw)
            except ValidationError as e:
                # Invalid fields fall back to their defaults, the rest are kept
                kept = _drop_invalid_fields(raw, e)
                logger.warning(
                    f"Ignoring invalid storage config fields: {sorted(set(raw) - set(kept))}"
                )
                return StorageConfig.model_validate(kept)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Failed to load storage config, using defaults: {e}")
            return StorageConfig()

    def get(self) -> StorageConfig:
        return self._config

    def merge(self, partial: Mapping[str, Any]) -> StorageConfig:
        """
        Shallow field-wise overwrite of the current record.

        Accepts either camelCase file keys or model field names. Unknown keys
        raise KeyError so typos never silently drop an update.
        """
        data = self._config.model_dump()
        for key, value in partial.items():
            name = _FIELD_NAMES.get(key, key)
            if name not in StorageConfig.model_fields:
                raise KeyError(f"Unknown storage config field: {key}")
            data[name] = value

        self._config = StorageConfig(**data)
        return self._config

    def save(self) -> bool:
        """Write the full record to disk. Returns False if the write failed."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(
                json.dumps(self._config.to_dict(), indent=2),
                encoding='utf-8',
            )
            logger.debug(f"Saved storage config to {self.config_path}")
            return True
        except OSError as e:
            self._diagnostics(Diagnostic(
                kind=StorageErrorKind.CONFIG_PERSIST_FAILURE,
                message=f"Failed to save storage config to {self.config_path}",
                error=e,
            ))
            return False

    def update(self, partial: Mapping[str, Any]) -> StorageConfig:
        """merge() then save(); the merged record is returned either way."""
        config = self.merge(partial)
        self.save()
        return config
