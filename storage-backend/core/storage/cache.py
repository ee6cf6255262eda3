"""
Cache Manager

Measures and clears the application cache directories and keeps the
auto-clean timer in step with the config.

@.architecture
Incoming: core/storage/service.py, app.py (startup/shutdown) --- {older_than_days thresholds, schedule/shutdown calls}
Processing: get_cache_size(), clear_cache(), AutoCleanScheduler.schedule(), AutoCleanScheduler.shutdown(), _auto_clean_loop() --- {4 jobs: size_accounting, full_clear, age_based_pruning, timer_management}
Outgoing: core/storage/fileops.py, Local filesystem --- {CacheSizeReport, int bytes freed, asyncio.Task}
"""

import asyncio
import time
from typing import Callable, Optional

from monitoring import get_logger, operation_context

from .config_store import ConfigStore
from .fileops import LocalFileOps, run_blocking
from .models import DEFAULT_AUTO_CLEAN_DAYS, CacheEntry, CacheSizeReport
from .paths import PathResolver

logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60
DEFAULT_AUTO_CLEAN_INTERVAL = SECONDS_PER_DAY


class CacheManager:
    """Size and clear operations over the resolver's cache directories."""

    def __init__(
        self,
        resolver: PathResolver,
        fs: Optional[LocalFileOps] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.resolver = resolver
        self.fs = fs or LocalFileOps()
        self._clock = clock

    async def get_cache_size(self) -> CacheSizeReport:
        report = CacheSizeReport()
        for cache_dir in self.resolver.resolve_cache_dirs():
            size = 0
            if cache_dir.exists():
                size = await run_blocking(self.fs.directory_size, cache_dir)
            report.details.append(CacheEntry(path=str(cache_dir), size=size))
        return report

    async def clear_cache(self, older_than_days: Optional[int] = None) -> int:
        """
        Clear the cache directories and return bytes freed.

        Without a positive ``older_than_days`` each directory is measured,
        deleted and recreated empty, and missing directories are created. With
        one, only files last modified before ``now - older_than_days`` are
        deleted, along with subdirectories that end up empty; the cache
        directories themselves are kept.
        """
        with operation_context("clear-cache"):
            if older_than_days is not None and older_than_days > 0:
                cleared = await self._clear_older_than(older_than_days)
                logger.info(f"Cleared {cleared} bytes of cache older than {older_than_days} days")
            else:
                cleared = await self._clear_all()
                logger.info(f"Cleared {cleared} bytes of cache")
            return cleared

    async def _clear_all(self) -> int:
        cleared = 0
        for cache_dir in self.resolver.resolve_cache_dirs():
            try:
                size = 0
                if cache_dir.exists():
                    size = await run_blocking(self.fs.directory_size, cache_dir)
                    await run_blocking(self.fs.remove_dir, cache_dir)
                await run_blocking(self.fs.ensure_dir, cache_dir)
                cleared += size
            except OSError as e:
                logger.warning(f"Failed to clear cache directory {cache_dir}: {e}")
        return cleared

    async def _clear_older_than(self, days: int) -> int:
        cutoff = self._clock() - days * SECONDS_PER_DAY
        cleared = 0
        for cache_dir in self.resolver.resolve_cache_dirs():
            if cache_dir.exists():
                cleared += await run_blocking(self.fs.delete_old_files, cache_dir, cutoff)
        return cleared


class AutoCleanScheduler:
    """
    Keeps at most one auto-clean timer alive.

    schedule() is called at startup and after every config update; it
    reads the current config, so callers never pass settings in.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        cache: CacheManager,
        interval_seconds: float = DEFAULT_AUTO_CLEAN_INTERVAL,
        default_days: int = DEFAULT_AUTO_CLEAN_DAYS,
    ):
        self.config_store = config_store
        self.cache = cache
        self.interval_seconds = interval_seconds
        self.default_days = default_days
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def is_armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def _effective_days(self) -> int:
        days = self.config_store.get().auto_clean_days
        return days if days > 0 else self.default_days

    async def schedule(self) -> None:
        async with self._lock:
            await self._cancel()

            config = self.config_store.get()
            if not config.auto_clean_enabled:
                logger.debug("Auto-clean disabled")
                return

            days = self._effective_days()
            try:
                await self.cache.clear_cache(days)
            except Exception as e:
                logger.error(f"Auto-clean failed: {e}", exc_info=True)

            self._task = asyncio.create_task(self._auto_clean_loop())
            logger.info(f"Auto-clean armed: every {self.interval_seconds}s, files older than {days} days")

    async def shutdown(self) -> None:
        async with self._lock:
            await self._cancel()

    async def _cancel(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    async def _auto_clean_loop(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.interval_seconds)
                await self.cache.clear_cache(self._effective_days())
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Auto-clean failed: {e}", exc_info=True)
