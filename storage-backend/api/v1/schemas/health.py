"""
Health Check Schemas

Pydantic models for health check endpoints.

@.architecture
Incoming: api/v1/endpoints/health.py --- {health check results, component status}
Processing: Pydantic validation and serialization --- {2 jobs: data_validation, serialization}
Outgoing: api/v1/endpoints/health.py --- {HealthCheckResponse, ComponentHealth, SimpleHealthResponse validated models}
"""

from typing import Dict, List, Optional, Any
from datetime import datetime, timezone
from pydantic import BaseModel, Field

from .common import HealthStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ComponentHealth(BaseModel):
    """Health status of a single component."""
    component: str
    status: HealthStatus
    message: Optional[str] = None
    response_time_ms: Optional[float] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class HealthCheckResponse(BaseModel):
    """Comprehensive health check response."""
    status: HealthStatus
    timestamp: datetime = Field(default_factory=_utcnow)
    uptime_seconds: float
    check_duration_ms: float
    components: List[ComponentHealth]

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "healthy",
                "timestamp": "2025-01-01T12:00:00Z",
                "uptime_seconds": 3600,
                "check_duration_ms": 4.1,
                "components": [
                    {
                        "component": "storage",
                        "status": "healthy",
                        "response_time_ms": 1.2,
                        "details": {"base_path": "/data", "auto_clean_armed": False}
                    }
                ]
            }
        }
    }


class SimpleHealthResponse(BaseModel):
    """Simple health check response."""
    status: str = "ok"
    timestamp: float
    uptime_seconds: float
