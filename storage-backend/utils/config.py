"""
Simple config loader for backend components.
Reads directly from the bundled TOML defaults.

@.architecture
Incoming: config/storage.toml, config/settings.py --- {TOML file, load_config calls}
Processing: load_config(), get_fallback_config() --- {2 jobs: config_loading, fallback_generation}
Outgoing: config/settings.py --- {Dict[str, Any] config data}
"""

from pathlib import Path
from typing import Any, Dict, Optional

import toml

from monitoring import get_logger

logger = get_logger(__name__)

CONFIG_FILE = Path(__file__).parent.parent / "config" / "storage.toml"


def load_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from the bundled TOML file."""
    path = config_file or CONFIG_FILE
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return toml.load(f)
    except Exception as e:
        logger.warning(f"Failed to load config from {path}, using fallback: {e}")
        return get_fallback_config()


def get_fallback_config() -> Dict[str, Any]:
    """Fallback configuration if TOML file can't be loaded."""
    return {
        "STORAGE": {
            "app_name": "storage-lifecycle",
            "config_filename": "storage-config.json",
            "export_prefix": "storage-data",
            "backup_prefix": "storage-backup",
            "cache_dir_names": ["Cache", "Code Cache", "GPUCache"],
            "default_auto_clean_days": 30,
            "auto_clean_interval_hours": 24,
        },
        "SERVER": {
            "bind_host": "127.0.0.1",
            "bind_port": 8765,
        },
        "MONITORING": {
            "log_level": "INFO",
            "log_format": "text",
        },
    }

