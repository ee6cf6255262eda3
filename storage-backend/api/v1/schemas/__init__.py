"""
API V1 Schemas

Pydantic models for request/response validation.
"""

from .common import (
    CamelModel,
    SuccessResponse,
    ErrorDetail,
    ErrorResponse,
    HealthStatus,
)

from .health import (
    HealthCheckResponse,
    ComponentHealth,
    SimpleHealthResponse,
)

from .storage import (
    PathRequest,
    ClearCacheRequest,
    UpdateConfigRequest,
    FileStorageSetRequest,
    StoragePathsResponse,
    SelectDirectoryResponse,
    ValidationResponse,
    OperationResponse,
    CacheDetail,
    CacheSizeResponse,
    StorageConfigResponse,
    UpdateConfigResponse,
    FileStorageValueResponse,
    FileStorageExistsResponse,
    FileStorageListResponse,
)

__all__ = [
    # Common
    "CamelModel",
    "SuccessResponse",
    "ErrorDetail",
    "ErrorResponse",
    "HealthStatus",
    # Health
    "HealthCheckResponse",
    "ComponentHealth",
    "SimpleHealthResponse",
    # Storage
    "PathRequest",
    "ClearCacheRequest",
    "UpdateConfigRequest",
    "FileStorageSetRequest",
    "StoragePathsResponse",
    "SelectDirectoryResponse",
    "ValidationResponse",
    "OperationResponse",
    "CacheDetail",
    "CacheSizeResponse",
    "StorageConfigResponse",
    "UpdateConfigResponse",
    "FileStorageValueResponse",
    "FileStorageExistsResponse",
    "FileStorageListResponse",
]
