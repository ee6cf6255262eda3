"""
Storage Service

Composition root for the storage lifecycle core. Built once at startup from
StorageSettings and injected into the API layer; owns the config store,
resolver, migration engine, cache manager, auto-clean scheduler and file
store, and exposes the operations the front-end calls.

@.architecture
Incoming: app.py (lifespan), api/v1/endpoints/storage.py, api/v1/endpoints/file_storage.py --- {StorageSettings, operation calls with raw path strings}
Processing: start(), stop(), get_paths(), select_directory(), validate_data_dir(), link_data(), move_data(), export_data(), import_data(), get_cache_size(), clear_cache(), update_config(), get_config() --- {5 jobs: component_wiring, lifecycle_management, operation_dispatch, config_updates, auto_clean_rescheduling}
Outgoing: core/storage/*.py, api/v1/endpoints/*.py --- {StoragePaths, ValidationResult, OperationResult, CacheSizeReport, StorageConfig}
"""

import time
from pathlib import Path
from typing import Callable, Optional

from config.settings import StorageSettings
from monitoring import get_logger

from .cache import AutoCleanScheduler, CacheManager
from .config_store import ConfigStore
from .errors import DiagnosticsSink, log_diagnostic
from .file_store import FileStore
from .fileops import LocalFileOps, run_blocking
from .migration import MigrationEngine
from .models import CacheSizeReport, OperationResult, StorageConfig, StoragePaths, ValidationResult
from .paths import PathResolver
from .validator import validate_data_dir

logger = get_logger(__name__)


class DirectoryPicker:
    """
    Asks the user for a directory.

    The backend has no UI of its own, so the default picker never chooses
    anything; a desktop shell injects one that opens a native dialog.
    """

    async def choose_directory(self) -> Optional[str]:
        return None


class StorageService:
    """Storage lifecycle operations over one application-data directory."""

    def __init__(
        self,
        settings: StorageSettings,
        *,
        app_data_dir: Optional[Path] = None,
        fs: Optional[LocalFileOps] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
        clock: Callable[[], float] = time.time,
        directory_picker: Optional[DirectoryPicker] = None,
        temp_dir: Optional[Path] = None,
    ):
        self.settings = settings
        self.app_data_dir = Path(app_data_dir) if app_data_dir else settings.resolve_app_data_dir()
        self.fs = fs or LocalFileOps()
        self.directory_picker = directory_picker or DirectoryPicker()
        diagnostics = diagnostics or log_diagnostic

        self.config_store = ConfigStore(self.app_data_dir / settings.config_filename, diagnostics)
        self.config_store.load()

        self.resolver = PathResolver(
            self.config_store,
            self.app_data_dir,
            cache_dir_names=settings.cache_dir_names,
        )
        self.migration = MigrationEngine(
            self.config_store,
            self.resolver,
            self.fs,
            diagnostics=diagnostics,
            clock=clock,
            export_prefix=settings.export_prefix,
            backup_prefix=settings.backup_prefix,
            temp_dir=temp_dir,
            protected_dir=self.app_data_dir,
        )
        self.cache = CacheManager(self.resolver, self.fs, clock)
        self.scheduler = AutoCleanScheduler(
            self.config_store,
            self.cache,
            interval_seconds=settings.auto_clean_interval_seconds,
            default_days=settings.default_auto_clean_days,
        )
        self.file_store = FileStore(self.resolver, self.fs)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Create the app-data directory and arm auto-clean from the loaded config."""
        logger.info(f"Starting storage service (app data: {self.app_data_dir})")
        await run_blocking(self.fs.ensure_dir, self.app_data_dir)
        await self.scheduler.schedule()
        logger.info(f"Storage base path: {self.resolver.resolve_base_path()}")

    async def stop(self) -> None:
        await self.scheduler.shutdown()
        logger.info("Storage service stopped")

    # =========================================================================
    # Paths & Validation
    # =========================================================================

    async def get_paths(self) -> StoragePaths:
        return StoragePaths(
            base_path=str(self.resolver.resolve_base_path()),
            project_path=str(self.resolver.resolve_project_root()),
            media_path=str(self.resolver.resolve_media_root()),
            cache_path=str(self.resolver.resolve_cache_path()),
        )

    async def select_directory(self) -> Optional[str]:
        return await self.directory_picker.choose_directory()

    async def validate_data_dir(self, path: str) -> ValidationResult:
        return await run_blocking(validate_data_dir, path)

    async def validate_project_dir(self, path: str) -> ValidationResult:
        return await self.validate_data_dir(path)

    # =========================================================================
    # Migration
    # =========================================================================

    async def link_data(self, path: str) -> OperationResult:
        return await self.migration.link(path)

    async def move_data(self, path: str) -> OperationResult:
        return await self.migration.move(path)

    async def export_data(self, path: str) -> OperationResult:
        return await self.migration.export(path)

    async def import_data(self, path: str) -> OperationResult:
        return await self.migration.import_data(path)

    async def link_project_data(self, path: str) -> OperationResult:
        return await self.migration.link_project_data(path)

    async def link_media_data(self, path: str) -> OperationResult:
        return await self.migration.link_media_data(path)

    async def move_project_data(self, path: str) -> OperationResult:
        return await self.migration.move_project_data(path)

    async def move_media_data(self, path: str) -> OperationResult:
        return await self.migration.move_media_data(path)

    # =========================================================================
    # Cache & Config
    # =========================================================================

    async def get_cache_size(self) -> CacheSizeReport:
        return await self.cache.get_cache_size()

    async def clear_cache(self, older_than_days: Optional[int] = None) -> OperationResult:
        try:
            cleared = await self.cache.clear_cache(older_than_days)
        except Exception as e:
            logger.error(f"Failed to clear cache: {e}", exc_info=True)
            return OperationResult.fail(str(e))
        return OperationResult.ok(cleared_bytes=cleared)

    def get_config(self) -> StorageConfig:
        return self.config_store.get()

    async def update_config(
        self,
        auto_clean_enabled: Optional[bool] = None,
        auto_clean_days: Optional[int] = None,
    ) -> StorageConfig:
        """Merge the auto-clean settings, persist them and re-arm the timer."""
        partial = {}
        if auto_clean_enabled is not None:
            partial["autoCleanEnabled"] = auto_clean_enabled
        if auto_clean_days is not None:
            partial["autoCleanDays"] = auto_clean_days

        config = self.config_store.update(partial)
        await self.scheduler.schedule()
        return config
