"""
Common Schemas

Shared Pydantic models used across API endpoints.

@.architecture
Incoming: api/v1/endpoints/*.py --- {JSON payloads, error data}
Processing: Pydantic validation and serialization --- {2 jobs: data_validation, serialization}
Outgoing: api/v1/endpoints/*.py --- {CamelModel, SuccessResponse, ErrorResponse, HealthStatus validated models}
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Base for models exchanged with the front-end in camelCase."""
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Response Models
# =============================================================================

class SuccessResponse(BaseModel):
    """Generic success response."""
    success: bool = True
    message: Optional[str] = None


class ErrorDetail(BaseModel):
    code: int
    message: str
    type: str
    traceback: Optional[List[str]] = None


class ErrorResponse(CamelModel):
    """Body returned by the error-handler middleware."""
    success: bool = False
    error: ErrorDetail
    request_id: Optional[str] = Field(default=None, alias="requestId")


# =============================================================================
# Status Models
# =============================================================================

class HealthStatus(str, Enum):
    """Health status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"
