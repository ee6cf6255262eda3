"""
Global Error Handler Middleware - API Layer

Last-resort handler: storage operations already answer with failure bodies,
so anything that reaches here escaped an endpoint. Storage precondition
errors keep their kind and message; everything else becomes a 500 whose
message is sanitized outside development.

@.architecture
Incoming: app.py (middleware registration), Exception objects from endpoints --- {FastAPI Request objects, StorageOperationError/InvalidKeyError/other exceptions}
Processing: dispatch(), classify_error(), _error_body(), _log_error() --- {4 jobs: exception_catching, error_classification, sanitization, logging}
Outgoing: monitoring/logging.py, Frontend (HTTP) --- {structured error logs, JSONResponse {success: false, error: {code, message, type}, requestId}}
"""

import traceback
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from api.v1.schemas.common import ErrorDetail, ErrorResponse
from core.storage.errors import StorageErrorKind, StorageOperationError
from core.storage.file_store import InvalidKeyError
from monitoring import get_logger

logger = get_logger(__name__)

SANITIZED_MESSAGE = "An error occurred processing your request"

# Precondition failures are the caller's fault; copy and rollback failures are ours
CLIENT_ERROR_STATUS = {
    StorageErrorKind.INVALID_PATH: 400,
    StorageErrorKind.DIRECTORY_NOT_FOUND: 404,
    StorageErrorKind.NO_VALID_DATA: 400,
    StorageErrorKind.PATH_CONFLICT: 409,
}


@dataclass(frozen=True)
class ErrorHandlerConfig:
    """
    How much of an unexpected error reaches the client.

    Attributes:
        include_traceback: Attach the formatted traceback (development only)
        sanitize_errors: Replace 5xx messages with a generic one
        log_errors: Log every handled error
    """
    include_traceback: bool = False
    sanitize_errors: bool = True
    log_errors: bool = True

    @classmethod
    def for_environment(cls, development: bool) -> "ErrorHandlerConfig":
        if development:
            return cls(include_traceback=True, sanitize_errors=False)
        return cls()


def classify_error(error: Exception, sanitize: bool = True) -> Tuple[int, str, str]:
    """
    Map an exception to ``(status_code, message, error_type)``.

    Storage errors report their kind as the type, so the front-end can
    branch on the same values it sees in failure bodies.
    """
    if isinstance(error, StorageOperationError):
        status_code = CLIENT_ERROR_STATUS.get(error.kind, 500)
        if status_code < 500 or not sanitize:
            return status_code, error.message, error.kind.value
        return status_code, SANITIZED_MESSAGE, error.kind.value

    error_type = type(error).__name__
    if isinstance(error, InvalidKeyError):
        return 400, str(error), error_type
    if isinstance(getattr(error, 'status_code', None), int):
        # HTTPException or similar
        detail = getattr(error, 'detail', None) or str(error)
        return error.status_code, str(detail), error_type

    return 500, SANITIZED_MESSAGE if sanitize else str(error), error_type


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Catches exceptions that escaped an endpoint and formats them as JSON."""

    def __init__(self, app: ASGIApp, config: Optional[ErrorHandlerConfig] = None):
        super().__init__(app)
        self.config = config or ErrorHandlerConfig()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            status_code, message, error_type = classify_error(e, self.config.sanitize_errors)
            if self.config.log_errors:
                self._log_error(request, e, status_code)
            return JSONResponse(
                status_code=status_code,
                content=self._error_body(request, e, status_code, message, error_type),
            )

    def _error_body(
        self, request: Request, error: Exception, status_code: int, message: str, error_type: str
    ) -> Dict[str, Any]:
        detail = ErrorDetail(code=status_code, message=message, type=error_type)
        if self.config.include_traceback:
            detail.traceback = traceback.format_exception(type(error), error, error.__traceback__)
        body = ErrorResponse(
            error=detail,
            # Set by setup_request_context; the endpoint runs in another task
            request_id=getattr(request.state, "request_id", None),
        )
        return body.model_dump(by_alias=True, exclude_none=True)

    def _log_error(self, request: Request, error: Exception, status_code: int) -> None:
        context = {
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "error_type": type(error).__name__,
        }
        if status_code >= 500:
            logger.error(f"Unhandled error on {request.url.path}: {error}", exc_info=True, **context)
        else:
            logger.warning(f"Request failed: {error}", **context)


def create_error_handler_middleware(development: bool = False):
    """Middleware class and kwargs for ``app.add_middleware``."""
    return ErrorHandlerMiddleware, {"config": ErrorHandlerConfig.for_environment(development)}
