"""
Storage Lifecycle Endpoints

HTTP surface of the storage service: resolved paths, directory validation,
link/move/export/import of the data roots, cache size/clear and the
auto-clean config. Operations answer with a success/failure body; only an
uninitialized service produces an HTTP error.

@.architecture
Incoming: api/v1/router.py, Frontend (HTTP GET/POST/PUT) --- {HTTP requests to /v1/api/storage/*, PathRequest, ClearCacheRequest, UpdateConfigRequest JSON payloads}
Processing: get_paths(), select_directory(), validate_data_dir(), link_data(), move_data(), export_data(), import_data(), get_cache_size(), clear_cache(), get_config(), update_config(), legacy_*() --- {4 jobs: dependency_injection, request_validation, operation_dispatch, serialization}
Outgoing: core/storage/service.py, Frontend (HTTP) --- {StorageService method calls, StoragePathsResponse, ValidationResponse, OperationResponse, CacheSizeResponse, UpdateConfigResponse schemas}
"""

from typing import Optional

from fastapi import APIRouter, Depends

from api.dependencies import get_storage_service, setup_request_context
from api.v1.schemas.storage import (
    CacheSizeResponse,
    ClearCacheRequest,
    OperationResponse,
    PathRequest,
    SelectDirectoryResponse,
    StorageConfigResponse,
    StoragePathsResponse,
    UpdateConfigRequest,
    UpdateConfigResponse,
    ValidationResponse,
)
from core.storage import StorageService
from monitoring import get_logger

logger = get_logger(__name__)
router = APIRouter(
    tags=["storage"],
    prefix="/api/storage",
    dependencies=[Depends(setup_request_context)],
)


# =============================================================================
# Paths & Validation
# =============================================================================

@router.get("/paths", response_model=StoragePathsResponse, summary="Resolved storage paths")
async def get_paths(
    service: StorageService = Depends(get_storage_service)
) -> StoragePathsResponse:
    return StoragePathsResponse.from_paths(await service.get_paths())


@router.post("/select-directory", response_model=SelectDirectoryResponse, summary="Ask the user for a directory")
async def select_directory(
    service: StorageService = Depends(get_storage_service)
) -> SelectDirectoryResponse:
    """Returns ``{"path": null}`` when the user cancels or no picker is available."""
    return SelectDirectoryResponse(path=await service.select_directory())


@router.post(
    "/validate",
    response_model=ValidationResponse,
    response_model_exclude_none=True,
    summary="Inspect a candidate data directory",
)
async def validate_data_dir(
    request: PathRequest,
    service: StorageService = Depends(get_storage_service)
) -> ValidationResponse:
    result = await service.validate_data_dir(request.path)
    return ValidationResponse.from_result(result)


# =============================================================================
# Migration
# =============================================================================

@router.post("/link", response_model=OperationResponse, response_model_exclude_none=True, summary="Link existing data")
async def link_data(
    request: PathRequest,
    service: StorageService = Depends(get_storage_service)
) -> OperationResponse:
    """Point storage at a directory that already holds projects/ or media/."""
    return OperationResponse.from_result(await service.link_data(request.path))


@router.post("/move", response_model=OperationResponse, response_model_exclude_none=True, summary="Move data")
async def move_data(
    request: PathRequest,
    service: StorageService = Depends(get_storage_service)
) -> OperationResponse:
    """Copy the live data to a new base directory and switch to it."""
    return OperationResponse.from_result(await service.move_data(request.path))


@router.post("/export", response_model=OperationResponse, response_model_exclude_none=True, summary="Export data")
async def export_data(
    request: PathRequest,
    service: StorageService = Depends(get_storage_service)
) -> OperationResponse:
    """Snapshot the live data into a timestamped directory under ``path``."""
    return OperationResponse.from_result(await service.export_data(request.path))


@router.post("/import", response_model=OperationResponse, response_model_exclude_none=True, summary="Import data")
async def import_data(
    request: PathRequest,
    service: StorageService = Depends(get_storage_service)
) -> OperationResponse:
    """Replace the live data with the projects/ and media/ found under ``path``."""
    return OperationResponse.from_result(await service.import_data(request.path))


# =============================================================================
# Cache
# =============================================================================

@router.get("/cache", response_model=CacheSizeResponse, summary="Cache size")
async def get_cache_size(
    service: StorageService = Depends(get_storage_service)
) -> CacheSizeResponse:
    return CacheSizeResponse.from_report(await service.get_cache_size())


@router.post("/cache/clear", response_model=OperationResponse, response_model_exclude_none=True, summary="Clear cache")
async def clear_cache(
    request: Optional[ClearCacheRequest] = None,
    service: StorageService = Depends(get_storage_service)
) -> OperationResponse:
    """Clear everything, or only files older than ``olderThanDays``."""
    older_than_days = request.older_than_days if request else None
    return OperationResponse.from_result(await service.clear_cache(older_than_days))


# =============================================================================
# Config
# =============================================================================

@router.get("/config", response_model=StorageConfigResponse, summary="Storage config")
async def get_config(
    service: StorageService = Depends(get_storage_service)
) -> StorageConfigResponse:
    return StorageConfigResponse.from_config(service.get_config())


@router.put("/config", response_model=UpdateConfigResponse, summary="Update auto-clean config")
async def update_config(
    request: UpdateConfigRequest,
    service: StorageService = Depends(get_storage_service)
) -> UpdateConfigResponse:
    config = await service.update_config(
        auto_clean_enabled=request.auto_clean_enabled,
        auto_clean_days=request.auto_clean_days,
    )
    logger.info(f"Storage config updated: autoClean={config.auto_clean_enabled}, days={config.auto_clean_days}")
    return UpdateConfigResponse(config=StorageConfigResponse.from_config(config))


# =============================================================================
# Legacy Operations
# =============================================================================

@router.post("/legacy/validate-project-dir", response_model=ValidationResponse, response_model_exclude_none=True)
async def legacy_validate_project_dir(
    request: PathRequest,
    service: StorageService = Depends(get_storage_service)
) -> ValidationResponse:
    return ValidationResponse.from_result(await service.validate_project_dir(request.path))


@router.post("/legacy/link-project-data", response_model=OperationResponse, response_model_exclude_none=True)
async def legacy_link_project_data(
    request: PathRequest,
    service: StorageService = Depends(get_storage_service)
) -> OperationResponse:
    return OperationResponse.from_result(await service.link_project_data(request.path))


@router.post("/legacy/link-media-data", response_model=OperationResponse, response_model_exclude_none=True)
async def legacy_link_media_data(
    request: PathRequest,
    service: StorageService = Depends(get_storage_service)
) -> OperationResponse:
    return OperationResponse.from_result(await service.link_media_data(request.path))


@router.post("/legacy/move-project-data", response_model=OperationResponse, response_model_exclude_none=True)
async def legacy_move_project_data(
    request: PathRequest,
    service: StorageService = Depends(get_storage_service)
) -> OperationResponse:
    return OperationResponse.from_result(await service.move_project_data(request.path))


@router.post("/legacy/move-media-data", response_model=OperationResponse, response_model_exclude_none=True)
async def legacy_move_media_data(
    request: PathRequest,
    service: StorageService = Depends(get_storage_service)
) -> OperationResponse:
    return OperationResponse.from_result(await service.move_media_data(request.path))
