"""
Pytest Configuration and Shared Fixtures

Provides temporary app-data/base directories, a storage service wired to
them, and an HTTP client for API tests.
"""

import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Generator, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Test environment setup
os.environ["BACKEND_ENVIRONMENT"] = "test"

from app import create_app
from config.settings import StorageSettings, get_settings, reload_settings
from api.dependencies import set_storage_service
from core.storage import ConfigStore, Diagnostic, LocalFileOps, PathResolver, StorageService


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test component interactions"
    )


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def test_settings():
    """Load test settings."""
    reload_settings()  # Clear cache and reload with test environment
    return get_settings()


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset settings after each test."""
    yield
    reload_settings()


@pytest.fixture
def storage_settings() -> StorageSettings:
    return StorageSettings(auto_clean_interval_hours=24)


# =============================================================================
# Temporary Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def app_data_dir(temp_dir: Path) -> Path:
    """Stand-in for the platform application-data directory."""
    path = temp_dir / "app-data"
    path.mkdir()
    return path


@pytest.fixture
def backup_tmp(temp_dir: Path) -> Path:
    """Directory that receives import backups instead of the system temp dir."""
    path = temp_dir / "tmp"
    path.mkdir()
    return path


@pytest.fixture
def make_data_root(temp_dir: Path):
    """Build a data root with the given project records and media files."""
    def create(name: str, projects: dict = None, media: dict = None) -> Path:
        root = temp_dir / name
        for kind, files in (("projects", projects), ("media", media)):
            if files is None:
                continue
            kind_dir = root / kind
            kind_dir.mkdir(parents=True, exist_ok=True)
            for relative, content in files.items():
                path = kind_dir / relative
                path.parent.mkdir(parents=True, exist_ok=True)
                if isinstance(content, bytes):
                    path.write_bytes(content)
                else:
                    path.write_text(content, encoding="utf-8")
        return root
    return create


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def diagnostics() -> List[Diagnostic]:
    """Collected diagnostics; pass ``diagnostics.append`` as the sink."""
    return []


@pytest.fixture
def config_store(app_data_dir: Path, diagnostics: List[Diagnostic]) -> ConfigStore:
    store = ConfigStore(app_data_dir / "storage-config.json", diagnostics.append)
    store.load()
    return store


@pytest.fixture
def resolver(config_store: ConfigStore, app_data_dir: Path) -> PathResolver:
    return PathResolver(config_store, app_data_dir)


@pytest.fixture
def fs() -> LocalFileOps:
    return LocalFileOps()


@pytest_asyncio.fixture
async def storage_service(
    storage_settings: StorageSettings,
    app_data_dir: Path,
    backup_tmp: Path,
    diagnostics: List[Diagnostic],
) -> AsyncGenerator[StorageService, None]:
    service = StorageService(
        storage_settings,
        app_data_dir=app_data_dir,
        diagnostics=diagnostics.append,
        temp_dir=backup_tmp,
    )
    await service.start()
    yield service
    await service.stop()


# =============================================================================
# FastAPI Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def app(test_settings, storage_service: StorageService):
    """
    Create FastAPI app for testing.

    ASGITransport does not run the lifespan, so the service is injected
    directly.
    """
    set_storage_service(storage_service)
    app = create_app(storage_service)
    yield app
    set_storage_service(None)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
