"""
API Dependencies

FastAPI dependency injection functions for:
- Storage service access
- Request context setup

@.architecture
Incoming: app.py (lifespan), api/v1/endpoints/*.py --- {set_storage_service calls, Depends() injections from endpoints}
Processing: set_storage_service(), get_storage_service(), get_file_store(), setup_request_context() --- {2 jobs: dependency_injection, context_setup}
Outgoing: api/v1/endpoints/*.py, app.py --- {StorageService instance, FileStore instance, request context dict}
"""

from typing import Optional
from fastapi import HTTPException, Header, Request
import uuid

from core.storage import FileStore, StorageService
from monitoring import get_logger, set_request_context

logger = get_logger(__name__)


# =============================================================================
# Storage Service Dependencies
# =============================================================================

_storage_service: Optional[StorageService] = None


def set_storage_service(service: Optional[StorageService]) -> None:
    """Set (or clear, with None) the global storage service instance."""
    global _storage_service
    _storage_service = service


def get_storage_service() -> StorageService:
    """
    Get the storage service instance.

    Returns:
        StorageService: The storage service built at startup

    Raises:
        HTTPException: If the storage service is not initialized
    """
    if _storage_service is None:
        logger.error("Storage service not initialized")
        raise HTTPException(
            status_code=503,
            detail="Storage service not initialized. Server is starting up."
        )
    return _storage_service


def get_file_store() -> FileStore:
    return get_storage_service().file_store


# =============================================================================
# Request Context Dependencies
# =============================================================================

async def setup_request_context(
    request: Request,
    x_request_id: Optional[str] = Header(None),
) -> dict:
    """
    Setup request context for logging.

    Args:
        request: FastAPI request object
        x_request_id: Optional request ID from header

    Returns:
        dict: Request context information
    """
    request_id = x_request_id or str(uuid.uuid4())

    set_request_context(request_id=request_id)
    request.state.request_id = request_id

    return {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path
    }
