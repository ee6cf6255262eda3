"""
Storage Schemas

Request/response models for the storage lifecycle and file storage
endpoints. Field names on the wire are camelCase to match the desktop
front-end.

@.architecture
Incoming: api/v1/endpoints/storage.py, api/v1/endpoints/file_storage.py, core/storage/models.py --- {JSON payloads, OperationResult/ValidationResult/CacheSizeReport/StoragePaths/StorageConfig}
Processing: Pydantic validation and serialization, from_result()/from_report()/from_config() --- {3 jobs: data_validation, core_model_conversion, serialization}
Outgoing: api/v1/endpoints/storage.py, api/v1/endpoints/file_storage.py --- {validated request models, camelCase response models}
"""

from typing import List, Optional

from pydantic import Field

from core.storage import (
    CacheSizeReport,
    OperationResult,
    StorageConfig,
    StoragePaths,
    ValidationResult,
)

from .common import CamelModel


# =============================================================================
# Requests
# =============================================================================

class PathRequest(CamelModel):
    """A candidate directory; empty paths are rejected by the operation itself."""
    path: str = ""


class ClearCacheRequest(CamelModel):
    older_than_days: Optional[int] = Field(default=None, ge=1, alias="olderThanDays")


class UpdateConfigRequest(CamelModel):
    auto_clean_enabled: Optional[bool] = Field(default=None, alias="autoCleanEnabled")
    auto_clean_days: Optional[int] = Field(default=None, ge=1, alias="autoCleanDays")


class FileStorageSetRequest(CamelModel):
    key: str
    value: str


# =============================================================================
# Responses
# =============================================================================

class StoragePathsResponse(CamelModel):
    base_path: str = Field(alias="basePath")
    project_path: str = Field(alias="projectPath")
    media_path: str = Field(alias="mediaPath")
    cache_path: str = Field(alias="cachePath")

    @classmethod
    def from_paths(cls, paths: StoragePaths) -> "StoragePathsResponse":
        return cls(**paths.to_dict())


class SelectDirectoryResponse(CamelModel):
    path: Optional[str] = None


class ValidationResponse(CamelModel):
    valid: bool
    error: Optional[str] = None
    error_kind: Optional[str] = Field(default=None, alias="errorKind")
    project_count: Optional[int] = Field(default=None, alias="projectCount")
    media_count: Optional[int] = Field(default=None, alias="mediaCount")

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidationResponse":
        return cls(**result.to_dict())


class OperationResponse(CamelModel):
    success: bool
    path: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = Field(default=None, alias="errorKind")
    conflict: Optional[str] = None
    cleared_bytes: Optional[int] = Field(default=None, alias="clearedBytes")

    @classmethod
    def from_result(cls, result: OperationResult) -> "OperationResponse":
        return cls(**result.to_dict())


class CacheDetail(CamelModel):
    path: str
    size: int


class CacheSizeResponse(CamelModel):
    total: int
    details: List[CacheDetail]

    @classmethod
    def from_report(cls, report: CacheSizeReport) -> "CacheSizeResponse":
        return cls(**report.to_dict())


class StorageConfigResponse(CamelModel):
    base_path: str = Field(alias="basePath")
    project_path: str = Field(alias="projectPath")
    media_path: str = Field(alias="mediaPath")
    auto_clean_enabled: bool = Field(alias="autoCleanEnabled")
    auto_clean_days: int = Field(alias="autoCleanDays")

    @classmethod
    def from_config(cls, config: StorageConfig) -> "StorageConfigResponse":
        return cls(**config.to_dict())


class UpdateConfigResponse(CamelModel):
    success: bool = True
    config: StorageConfigResponse


class FileStorageValueResponse(CamelModel):
    key: str
    value: Optional[str] = None


class FileStorageExistsResponse(CamelModel):
    key: str
    exists: bool


class FileStorageListResponse(CamelModel):
    prefix: str
    keys: List[str]
