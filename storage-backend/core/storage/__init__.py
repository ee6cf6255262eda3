"""
Storage Lifecycle Core

Where user data lives, how it is relocated, snapshotted and restored, and
how the application cache is pruned.

Architecture:
- ConfigStore persists the storage config record
- PathResolver derives the live roots with legacy fallback
- Directory validator inspects candidate data roots
- MigrationEngine links, moves, exports and imports data
- CacheManager and AutoCleanScheduler size and prune the cache
- FileStore keeps opaque records under the project root
- StorageService wires them together for the API layer
"""

from core.storage.cache import AutoCleanScheduler, CacheManager
from core.storage.config_store import ConfigStore
from core.storage.errors import (
    ConflictKind,
    CopyFailureError,
    Diagnostic,
    DirectoryNotFoundError,
    InvalidPathError,
    NoValidDataError,
    PathConflictError,
    StorageErrorKind,
    StorageOperationError,
)
from core.storage.file_store import FileStore
from core.storage.fileops import LocalFileOps
from core.storage.migration import ImportState, ImportTransaction, MigrationEngine
from core.storage.models import (
    CacheSizeReport,
    DataKind,
    OperationResult,
    StorageConfig,
    StoragePaths,
    ValidationResult,
)
from core.storage.paths import PathResolver
from core.storage.service import DirectoryPicker, StorageService
from core.storage.validator import validate_data_dir

__all__ = [
    # Service
    "StorageService",
    "DirectoryPicker",
    # Components
    "ConfigStore",
    "PathResolver",
    "MigrationEngine",
    "ImportState",
    "ImportTransaction",
    "CacheManager",
    "AutoCleanScheduler",
    "FileStore",
    "LocalFileOps",
    "validate_data_dir",
    # Models
    "StorageConfig",
    "DataKind",
    "OperationResult",
    "ValidationResult",
    "CacheSizeReport",
    "StoragePaths",
    # Errors
    "StorageErrorKind",
    "ConflictKind",
    "Diagnostic",
    "StorageOperationError",
    "InvalidPathError",
    "DirectoryNotFoundError",
    "NoValidDataError",
    "PathConflictError",
    "CopyFailureError",
]
