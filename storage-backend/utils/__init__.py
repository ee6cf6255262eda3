"""
Utilities Package - Helper modules.

Provides:
- config: TOML configuration loading
"""

from .config import (
    load_config,
    get_fallback_config,
)

__all__ = [
    'load_config',
    'get_fallback_config',
]
