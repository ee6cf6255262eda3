"""
Path Resolver

Derives the live data roots and cache directories from the Config Store.
The base path comes from an ordered list of resolution strategies; the last
tier (the application-data directory) always answers, so resolution never
fails.

@.architecture
Incoming: core/storage/service.py, core/storage/migration.py, core/storage/cache.py, core/storage/file_store.py --- {resolve_* calls, raw path strings}
Processing: resolve_base_path(), resolve_project_root(), resolve_media_root(), resolve_cache_dirs(), normalize_path(), is_subdirectory(), paths_conflict() --- {4 jobs: fallback_resolution, path_normalization, lazy_directory_creation, conflict_detection}
Outgoing: core/storage/*.py, Local filesystem (mkdir) --- {absolute Path objects, ConflictKind or None}
"""

import os
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from monitoring import get_logger

from .config_store import ConfigStore
from .errors import ConflictKind
from .models import DataKind, StorageConfig

logger = get_logger(__name__)

PathLike = Union[str, Path]

DEFAULT_CACHE_DIR_NAMES = ("Cache", "Code Cache", "GPUCache")

ResolutionStrategy = Callable[[StorageConfig], Optional[Path]]


# =============================================================================
# Path Helpers
# =============================================================================

def ensure_dir(path: PathLike) -> Path:
    """Create ``path`` (and parents) if missing."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def normalize_path(raw: PathLike) -> Path:
    """Absolute, normalized form of ``raw`` (symlinks are not resolved)."""
    return Path(os.path.abspath(os.path.expanduser(str(raw))))


def _folded(path: PathLike) -> str:
    return str(normalize_path(path)).lower().rstrip(os.sep) + os.sep


def same_path(a: PathLike, b: PathLike) -> bool:
    return _folded(a) == _folded(b)


def is_subdirectory(parent: PathLike, child: PathLike) -> bool:
    """
    True if ``child`` is ``parent`` or lies underneath it.

    Comparison is case-insensitive and separator-aware, so ``/data/a`` is
    not considered a parent of ``/data/ab``.
    """
    return _folded(child).startswith(_folded(parent))


def paths_conflict(source: PathLike, dest: PathLike) -> Optional[ConflictKind]:
    """Return the nesting relationship that makes copying source to dest unsafe."""
    if same_path(source, dest):
        return None
    if is_subdirectory(source, dest):
        return ConflictKind.SOURCE_IS_ANCESTOR
    if is_subdirectory(dest, source):
        return ConflictKind.DEST_IS_ANCESTOR
    return None


# =============================================================================
# Resolution Strategies
# =============================================================================

def configured_base_path(config: StorageConfig) -> Optional[Path]:
    """Tier 1: the explicit basePath."""
    configured = config.base_path.strip()
    return normalize_path(configured) if configured else None


def legacy_project_parent(config: StorageConfig) -> Optional[Path]:
    """Tier 2: parent of a legacy projectPath from older config files."""
    legacy = config.project_path.strip()
    return normalize_path(legacy).parent if legacy else None


DEFAULT_STRATEGIES: Sequence[ResolutionStrategy] = (
    configured_base_path,
    legacy_project_parent,
)


class PathResolver:
    """
    Resolves storage locations from the current config.

    The project and media roots are created on first resolution; the base
    path itself is never created here.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        app_data_dir: PathLike,
        cache_dir_names: Sequence[str] = DEFAULT_CACHE_DIR_NAMES,
        strategies: Optional[Sequence[ResolutionStrategy]] = None,
    ):
        self.config_store = config_store
        self.app_data_dir = normalize_path(app_data_dir)
        self.cache_dir_names = list(cache_dir_names)
        self.strategies: List[ResolutionStrategy] = list(
            DEFAULT_STRATEGIES if strategies is None else strategies
        )

    def resolve_base_path(self) -> Path:
        config = self.config_store.get()
        for strategy in self.strategies:
            resolved = strategy(config)
            if resolved is not None:
                return resolved
        return self.app_data_dir

    def resolve_root(self, kind: DataKind) -> Path:
        return ensure_dir(self.resolve_base_path() / kind.value)

    def resolve_project_root(self) -> Path:
        return self.resolve_root(DataKind.PROJECTS)

    def resolve_media_root(self) -> Path:
        return self.resolve_root(DataKind.MEDIA)

    def resolve_cache_dirs(self) -> List[Path]:
        """Cache directories live under the app-data dir, independent of basePath."""
        return [self.app_data_dir / name for name in self.cache_dir_names]

    def resolve_cache_path(self) -> Path:
        return self.resolve_cache_dirs()[0]
