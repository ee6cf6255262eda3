"""
File Storage Endpoints

Key/value record storage under the live project root. Keys may be nested
(``_p/<id>/script``) and are passed as query parameters.

@.architecture
Incoming: api/v1/router.py, Frontend (HTTP GET/POST/DELETE) --- {HTTP requests to /v1/api/file-storage/*, key/prefix query params, FileStorageSetRequest JSON payloads}
Processing: get_record(), set_record(), remove_record(), record_exists(), list_records(), remove_records() --- {2 jobs: dependency_injection, record_dispatch}
Outgoing: core/storage/file_store.py, Frontend (HTTP) --- {FileStore method calls, FileStorageValueResponse, FileStorageExistsResponse, FileStorageListResponse, SuccessResponse schemas}
"""

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_file_store, setup_request_context
from api.v1.schemas.common import SuccessResponse
from api.v1.schemas.storage import (
    FileStorageExistsResponse,
    FileStorageListResponse,
    FileStorageSetRequest,
    FileStorageValueResponse,
)
from core.storage import FileStore

router = APIRouter(
    tags=["file-storage"],
    prefix="/api/file-storage",
    dependencies=[Depends(setup_request_context)],
)


@router.get("/get", response_model=FileStorageValueResponse, summary="Read a record")
async def get_record(
    key: str = Query(..., min_length=1),
    store: FileStore = Depends(get_file_store)
) -> FileStorageValueResponse:
    """``value`` is null for missing records and rejected keys."""
    return FileStorageValueResponse(key=key, value=await store.get(key))


@router.post("/set", response_model=SuccessResponse, summary="Write a record")
async def set_record(
    request: FileStorageSetRequest,
    store: FileStore = Depends(get_file_store)
) -> SuccessResponse:
    return SuccessResponse(success=await store.set(request.key, request.value))


@router.delete("/remove", response_model=SuccessResponse, summary="Delete a record")
async def remove_record(
    key: str = Query(..., min_length=1),
    store: FileStore = Depends(get_file_store)
) -> SuccessResponse:
    return SuccessResponse(success=await store.remove(key))


@router.get("/exists", response_model=FileStorageExistsResponse, summary="Check a record")
async def record_exists(
    key: str = Query(..., min_length=1),
    store: FileStore = Depends(get_file_store)
) -> FileStorageExistsResponse:
    return FileStorageExistsResponse(key=key, exists=await store.exists(key))


@router.get("/list", response_model=FileStorageListResponse, summary="List records under a prefix")
async def list_records(
    prefix: str = Query(..., min_length=1),
    store: FileStore = Depends(get_file_store)
) -> FileStorageListResponse:
    return FileStorageListResponse(prefix=prefix, keys=await store.list(prefix))


@router.delete("/remove-dir", response_model=SuccessResponse, summary="Delete every record under a prefix")
async def remove_records(
    prefix: str = Query(..., min_length=1),
    store: FileStore = Depends(get_file_store)
) -> SuccessResponse:
    return SuccessResponse(success=await store.remove_dir(prefix))
