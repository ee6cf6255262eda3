"""
Health Check Endpoints

@.architecture
Incoming: api/v1/router.py, Frontend (HTTP GET) --- {HTTP requests to /v1/health, /v1/health/detailed, /v1/health/ready, /v1/health/live}
Processing: health_check(), detailed_health_check(), readiness_probe(), liveness_probe(), check_storage_health() --- {2 jobs: component_checking, health_monitoring}
Outgoing: api/dependencies.py, core/storage/service.py, Frontend (HTTP) --- {HealthCheckResponse, SimpleHealthResponse, ComponentHealth schemas}
"""

import os
import time

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.dependencies import get_storage_service, setup_request_context
from api.v1.schemas.common import HealthStatus
from api.v1.schemas.health import ComponentHealth, HealthCheckResponse, SimpleHealthResponse
from monitoring import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["health"])

# Track startup time
START_TIME = time.time()


@router.get(
    "/health",
    response_model=SimpleHealthResponse,
    summary="Simple health check",
)
async def health_check() -> SimpleHealthResponse:
    return SimpleHealthResponse(
        status="ok",
        timestamp=time.time(),
        uptime_seconds=time.time() - START_TIME
    )


async def check_storage_health() -> ComponentHealth:
    """
    Storage component health.

    Unhealthy when the service is missing or the app-data directory is not
    writable; degraded when the configured base path has disappeared.
    """
    started = time.time()
    try:
        service = get_storage_service()
    except HTTPException as e:
        return ComponentHealth(component="storage", status=HealthStatus.UNHEALTHY, message=str(e.detail))

    base_path = service.resolver.resolve_base_path()
    details = {
        "app_data_dir": str(service.app_data_dir),
        "base_path": str(base_path),
        "auto_clean_armed": service.scheduler.is_armed,
    }

    if not os.access(service.app_data_dir, os.W_OK):
        health, message = HealthStatus.UNHEALTHY, "Application data directory is not writable"
    elif not base_path.is_dir():
        health, message = HealthStatus.DEGRADED, "Configured base path does not exist"
    else:
        health, message = HealthStatus.HEALTHY, None

    return ComponentHealth(
        component="storage",
        status=health,
        message=message,
        response_time_ms=(time.time() - started) * 1000,
        details=details,
    )


@router.get(
    "/health/detailed",
    response_model=HealthCheckResponse,
    summary="Detailed health check",
)
async def detailed_health_check(
    _context: dict = Depends(setup_request_context)
) -> HealthCheckResponse:
    start_time = time.time()
    storage = await check_storage_health()
    return HealthCheckResponse(
        status=storage.status,
        uptime_seconds=time.time() - START_TIME,
        check_duration_ms=(time.time() - start_time) * 1000,
        components=[storage],
    )


@router.get("/health/ready", summary="Readiness probe")
async def readiness_probe(response: Response) -> dict:
    """Returns 503 until the storage service has been initialized."""
    storage = await check_storage_health()
    if storage.status == HealthStatus.UNHEALTHY:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"ready": False, "reason": storage.message}
    return {"ready": True}


@router.get("/health/live", summary="Liveness probe")
async def liveness_probe() -> dict:
    return {
        "alive": True,
        "uptime_seconds": time.time() - START_TIME
    }
