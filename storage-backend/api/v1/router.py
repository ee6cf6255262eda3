"""
API V1 Router

Aggregates all v1 endpoint routers into a single versioned API.

@.architecture
Incoming: app.py, api/v1/endpoints/*.py --- {app.include_router() call, 3 endpoint router instances}
Processing: api_v1_router.include_router() for 3 endpoints --- {1 job: router_aggregation}
Outgoing: app.py, api/v1/endpoints/*.py --- {APIRouter with /v1 prefix, HTTP request routing to endpoints}
"""

from fastapi import APIRouter

from .endpoints import (
    health_router,
    storage_router,
    file_storage_router,
)

# Create v1 router
api_v1_router = APIRouter(prefix="/v1")

# Health (no prefix)
api_v1_router.include_router(health_router)

# Storage lifecycle (has /api/storage prefix)
api_v1_router.include_router(storage_router)

# File storage records (has /api/file-storage prefix)
api_v1_router.include_router(file_storage_router)
