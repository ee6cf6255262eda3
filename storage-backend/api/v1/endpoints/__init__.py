"""
API V1 Endpoints

FastAPI routers for all API endpoints.
"""

from .health import router as health_router
from .storage import router as storage_router
from .file_storage import router as file_storage_router

__all__ = [
    "health_router",
    "storage_router",
    "file_storage_router",
]
