"""
Unit Tests: Cache Manager

Tests for cache sizing, full and age-based clearing, and the auto-clean
scheduler.
"""

import asyncio
import os
import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.storage import AutoCleanScheduler, CacheManager

DAY = 24 * 60 * 60


def write(path, size, age_days=0):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    if age_days:
        stamp = time.time() - age_days * DAY
        os.utime(path, (stamp, stamp))
    return path


@pytest.fixture
def cache(resolver) -> CacheManager:
    return CacheManager(resolver)


class TestCacheSize:
    """Test get_cache_size()."""

    @pytest.mark.asyncio
    async def test_missing_dirs_count_zero(self, cache, app_data_dir):
        report = await cache.get_cache_size()

        assert report.total == 0
        assert [entry.path for entry in report.details] == [
            str(app_data_dir / "Cache"),
            str(app_data_dir / "Code Cache"),
            str(app_data_dir / "GPUCache"),
        ]
        assert all(entry.size == 0 for entry in report.details)

    @pytest.mark.asyncio
    async def test_sizes_are_recursive(self, cache, app_data_dir):
        write(app_data_dir / "Cache" / "a.bin", 100)
        write(app_data_dir / "GPUCache" / "deep" / "er" / "b.bin", 50)

        report = await cache.get_cache_size()

        assert report.total == 150
        assert report.to_dict()["details"][0] == {"path": str(app_data_dir / "Cache"), "size": 100}
        assert report.details[2].size == 50


class TestClearCache:
    """Test clear_cache()."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("threshold", [None, 0, -3])
    async def test_full_clear(self, cache, app_data_dir, threshold):
        write(app_data_dir / "Cache" / "a.bin", 100)
        write(app_data_dir / "Code Cache" / "js" / "b.bin", 20, age_days=90)

        cleared = await cache.clear_cache(threshold)

        assert cleared == 120
        for name in ("Cache", "Code Cache", "GPUCache"):
            assert (app_data_dir / name).is_dir()
            assert list((app_data_dir / name).iterdir()) == []

    @pytest.mark.asyncio
    async def test_full_clear_creates_missing_dirs(self, cache, resolver, app_data_dir):
        write(app_data_dir / "Cache" / "a.bin", 10)

        assert await cache.clear_cache() == 10

        assert all(cache_dir.is_dir() for cache_dir in resolver.resolve_cache_dirs())

    @pytest.mark.asyncio
    async def test_age_based_clear(self, cache, app_data_dir):
        cache_dir = app_data_dir / "Cache"
        write(cache_dir / "old.bin", 100, age_days=10)
        write(cache_dir / "stale" / "old.bin", 30, age_days=10)
        fresh = write(cache_dir / "mixed" / "fresh.bin", 7)
        write(cache_dir / "mixed" / "old.bin", 5, age_days=10)

        cleared = await cache.clear_cache(7)

        assert cleared == 135
        assert cache_dir.is_dir()
        assert not (cache_dir / "old.bin").exists()
        assert not (cache_dir / "stale").exists()
        assert fresh.exists()
        assert not (cache_dir / "mixed" / "old.bin").exists()

    @pytest.mark.asyncio
    async def test_age_based_clear_keeps_empty_top_level(self, cache, app_data_dir):
        write(app_data_dir / "GPUCache" / "old.bin", 10, age_days=40)

        cleared = await cache.clear_cache(30)

        assert cleared == 10
        assert (app_data_dir / "GPUCache").is_dir()

    @pytest.mark.asyncio
    async def test_age_uses_injected_clock(self, resolver, app_data_dir):
        write(app_data_dir / "Cache" / "recent.bin", 10, age_days=2)
        cache = CacheManager(resolver, clock=lambda: time.time() + 30 * DAY)

        assert await cache.clear_cache(7) == 10


class TestAutoCleanScheduler:
    """Test auto-clean scheduling."""

    @pytest.fixture
    def mock_cache(self):
        cache = MagicMock()
        cache.clear_cache = AsyncMock(return_value=0)
        return cache

    @pytest.mark.asyncio
    async def test_disabled_does_not_arm(self, config_store, mock_cache):
        scheduler = AutoCleanScheduler(config_store, mock_cache)

        await scheduler.schedule()

        assert scheduler.is_armed is False
        mock_cache.clear_cache.assert_not_called()

    @pytest.mark.asyncio
    async def test_enabled_runs_immediately_and_arms(self, config_store, mock_cache):
        config_store.merge({"autoCleanEnabled": True, "autoCleanDays": 5})
        scheduler = AutoCleanScheduler(config_store, mock_cache)

        await scheduler.schedule()

        mock_cache.clear_cache.assert_awaited_once_with(5)
        assert scheduler.is_armed is True
        await scheduler.shutdown()
        assert scheduler.is_armed is False

    @pytest.mark.asyncio
    async def test_non_positive_days_use_default(self, config_store, mock_cache):
        config_store.merge({"autoCleanEnabled": True, "autoCleanDays": 0})
        scheduler = AutoCleanScheduler(config_store, mock_cache, default_days=30)

        await scheduler.schedule()

        mock_cache.clear_cache.assert_awaited_once_with(30)
        await scheduler.shutdown()

    @pytest.mark.asyncio
    async def test_reschedule_keeps_single_timer(self, config_store, mock_cache):
        config_store.merge({"autoCleanEnabled": True})
        scheduler = AutoCleanScheduler(config_store, mock_cache)

        await scheduler.schedule()
        first = scheduler._task
        await scheduler.schedule()
        second = scheduler._task

        assert first is not second
        assert first.cancelled() or first.done()
        assert scheduler.is_armed is True
        await scheduler.shutdown()

    @pytest.mark.asyncio
    async def test_disabling_cancels_timer(self, config_store, mock_cache):
        config_store.merge({"autoCleanEnabled": True})
        scheduler = AutoCleanScheduler(config_store, mock_cache)
        await scheduler.schedule()

        config_store.merge({"autoCleanEnabled": False})
        await scheduler.schedule()

        assert scheduler.is_armed is False

    @pytest.mark.asyncio
    async def test_timer_repeats(self, config_store, mock_cache):
        config_store.merge({"autoCleanEnabled": True, "autoCleanDays": 3})
        scheduler = AutoCleanScheduler(config_store, mock_cache, interval_seconds=0.01)

        await scheduler.schedule()
        await asyncio.sleep(0.1)
        await scheduler.shutdown()

        assert mock_cache.clear_cache.await_count >= 2
        mock_cache.clear_cache.assert_awaited_with(3)

    @pytest.mark.asyncio
    async def test_failed_clear_still_arms(self, config_store, mock_cache):
        config_store.merge({"autoCleanEnabled": True})
        mock_cache.clear_cache.side_effect = OSError("disk gone")
        scheduler = AutoCleanScheduler(config_store, mock_cache)

        await scheduler.schedule()

        assert scheduler.is_armed is True
        await scheduler.shutdown()

    @pytest.mark.asyncio
    async def test_immediate_clear_removes_old_files(self, config_store, cache, app_data_dir):
        config_store.merge({"autoCleanEnabled": True, "autoCleanDays": 7})
        old = write(app_data_dir / "Cache" / "old.bin", 10, age_days=30)
        scheduler = AutoCleanScheduler(config_store, cache)

        await scheduler.schedule()
        await scheduler.shutdown()

        assert not old.exists()
