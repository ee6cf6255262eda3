"""
Monitoring Layer

Structured logging for the storage backend:
- JSON or text formatting
- Request id and storage-operation context injection
- Environment presets
"""

from .logging import (
    JSONFormatter,
    ContextFilter,
    StructuredLogger,
    configure_logging,
    configure_from_preset,
    get_logger,
    set_request_context,
    clear_request_context,
    get_request_id,
    get_operation,
    operation_context,
    LOGGING_PRESETS,
)

__all__ = [
    'JSONFormatter',
    'ContextFilter',
    'StructuredLogger',
    'configure_logging',
    'configure_from_preset',
    'get_logger',
    'set_request_context',
    'clear_request_context',
    'get_request_id',
    'get_operation',
    'operation_context',
    'LOGGING_PRESETS',
]
