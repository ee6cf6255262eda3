"""
FastAPI Application Factory

Creates and configures the FastAPI application with:
- API versioning
- Middleware (CORS, error handling)
- Dependency injection setup
- Lifecycle management (startup/shutdown)

@.architecture
Incoming: main.py, config/settings.py, api/v1/router.py, api/middleware/*.py, core/storage/service.py --- {Settings object, APIRouter instances, middleware constructors, StorageService}
Processing: create_app(), lifespan() --- {6 jobs: application_creation, middleware_registration, routing_registration, dependency_injection, lifecycle_management, cleanup}
Outgoing: main.py, Frontend (HTTP) --- {FastAPI application instance, HTTP responses}
"""

from contextlib import asynccontextmanager
from typing import Optional
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import get_settings
from api.v1.router import api_v1_router
from api.middleware import create_error_handler_middleware
from api.dependencies import set_storage_service
from core.storage import StorageService
from monitoring import configure_from_preset, get_logger

logger = get_logger(__name__)

# Track startup time for uptime calculation
START_TIME = time.time()


def create_app(storage_service: Optional[StorageService] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        storage_service: Pre-built service to serve; built from settings at
            startup when omitted.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    # Configure logging based on environment
    if settings.environment == "production":
        configure_from_preset("production")
    elif settings.environment == "test":
        configure_from_preset("testing")
    else:
        configure_from_preset(
            "development",
            level=settings.monitoring.log_level,
            format_type=settings.monitoring.log_format,
            log_file=settings.monitoring.log_file,
        )

    logger.info(f"Creating Storage Backend application (environment: {settings.environment})")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info("Starting Storage Backend")
        logger.info("=" * 60)

        service = storage_service or StorageService(settings.storage)
        await service.start()
        set_storage_service(service)
        app.state.storage_service = service
        logger.info(f"✅ Storage Backend ready on {settings.base_url}")

        try:
            yield
        finally:
            logger.info("Shutting down Storage Backend")
            try:
                await service.stop()
            except Exception as e:
                logger.error(f"Error stopping storage service: {e}", exc_info=True)
            set_storage_service(None)
            logger.info("Storage Backend shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Storage lifecycle backend for the desktop client",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        redirect_slashes=False,
        lifespan=lifespan,
    )

    # ==========================================================================
    # Middleware Configuration
    # ==========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.allowed_origins,
        allow_credentials=settings.security.cors_allow_credentials,
        allow_methods=settings.security.cors_allow_methods,
        allow_headers=settings.security.cors_allow_headers,
    )

    middleware_class, middleware_kwargs = create_error_handler_middleware(
        development=settings.environment == "development"
    )
    app.add_middleware(middleware_class, **middleware_kwargs)

    # ==========================================================================
    # API Routers
    # ==========================================================================

    app.include_router(api_v1_router)

    @app.get("/")
    async def root():
        return JSONResponse({
            "status": "ok",
            "message": "Storage Backend API",
            "version": settings.app_version,
            "environment": settings.environment,
            "docs": "/docs"
        })

    # Root-level health endpoint for frontend compatibility
    @app.get("/health")
    async def health_check():
        return JSONResponse({
            "status": "ok",
            "timestamp": time.time(),
            "uptime_seconds": time.time() - START_TIME,
            "version": settings.app_version
        })

    return app
