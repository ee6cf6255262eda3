"""
Unit Tests: Path Resolver

Tests for base path fallback, root creation and path comparison helpers.
"""

import os

import pytest

from core.storage import ConflictKind, DataKind, PathResolver
from core.storage.paths import is_subdirectory, normalize_path, paths_conflict, same_path


class TestBasePathResolution:
    """Test the base path fallback chain."""

    def test_defaults_to_app_data_dir(self, resolver, app_data_dir):
        assert resolver.resolve_base_path() == app_data_dir

    def test_configured_base_path_wins(self, resolver, config_store, temp_dir):
        config_store.merge({"basePath": str(temp_dir / "custom"), "projectPath": "/data/old/projects"})

        assert resolver.resolve_base_path() == temp_dir / "custom"

    def test_legacy_project_path_parent(self, resolver, config_store):
        config_store.merge({"projectPath": "/data/old/projects"})

        assert resolver.resolve_base_path() == normalize_path("/data/old")

    def test_blank_base_path_is_ignored(self, resolver, config_store, app_data_dir):
        config_store.merge({"basePath": "   "})

        assert resolver.resolve_base_path() == app_data_dir

    def test_relative_base_path_is_absolutized(self, resolver, config_store):
        config_store.merge({"basePath": "relative/data"})

        resolved = resolver.resolve_base_path()

        assert resolved.is_absolute()
        assert resolved == normalize_path(os.path.join(os.getcwd(), "relative/data"))

    def test_custom_strategies(self, config_store, app_data_dir, temp_dir):
        resolver = PathResolver(config_store, app_data_dir, strategies=[lambda config: temp_dir])

        assert resolver.resolve_base_path() == temp_dir


class TestRoots:
    """Test project/media root resolution."""

    def test_roots_are_created(self, resolver, app_data_dir):
        project_root = resolver.resolve_project_root()
        media_root = resolver.resolve_media_root()

        assert project_root == app_data_dir / "projects"
        assert media_root == app_data_dir / "media"
        assert project_root.is_dir()
        assert media_root.is_dir()

    def test_roots_follow_base_path(self, resolver, config_store, temp_dir):
        config_store.merge({"basePath": str(temp_dir / "elsewhere")})

        assert resolver.resolve_root(DataKind.MEDIA) == temp_dir / "elsewhere" / "media"

    def test_cache_dirs_live_under_app_data(self, resolver, config_store, app_data_dir, temp_dir):
        config_store.merge({"basePath": str(temp_dir / "elsewhere")})

        assert resolver.resolve_cache_dirs() == [
            app_data_dir / "Cache",
            app_data_dir / "Code Cache",
            app_data_dir / "GPUCache",
        ]
        assert resolver.resolve_cache_path() == app_data_dir / "Cache"

    def test_cache_dirs_are_not_created(self, resolver):
        assert not any(path.exists() for path in resolver.resolve_cache_dirs())


class TestPathHelpers:
    """Test path comparison helpers."""

    def test_is_subdirectory(self):
        assert is_subdirectory("/data", "/data/a/b")
        assert is_subdirectory("/data", "/data")
        assert not is_subdirectory("/data/a", "/data")

    def test_is_subdirectory_is_separator_aware(self):
        assert not is_subdirectory("/data/a", "/data/ab")

    def test_is_subdirectory_ignores_case(self):
        assert is_subdirectory("/Data/Projects", "/data/projects/x")

    def test_same_path_ignores_trailing_separator(self):
        assert same_path("/data/a/", "/data/a")

    @pytest.mark.parametrize("source, dest, expected", [
        ("/data", "/data/inner", ConflictKind.SOURCE_IS_ANCESTOR),
        ("/data/inner", "/data", ConflictKind.DEST_IS_ANCESTOR),
        ("/data/a", "/data/b", None),
        ("/data/a", "/data/a", None),
    ])
    def test_paths_conflict(self, source, dest, expected):
        assert paths_conflict(source, dest) == expected
