"""
Structured Logging - Monitoring Layer

Every module logs through ``get_logger(__name__)``. Keyword arguments on a
log call become structured fields; the request id (set per HTTP request)
and the running storage operation (set by ``operation_context``) are
attached to every record, so one import or move can be followed end to end.

@.architecture
Incoming: app.py, api/dependencies.py, core/storage/*.py via get_logger() --- {str level, str format_type, Dict[str, str] module_levels, str request_id/operation}
Processing: configure_logging(), JSONFormatter.format(), ContextFilter.filter(), operation_context(), StructuredLogger.log() --- {4 jobs: context_injection, formatting, log_configuration, structured_logging}
Outgoing: sys.stdout, Log files, All modules --- {StructuredLogger instances, JSON or text log lines, context variables}
"""

import json
import logging
import sys
import traceback
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

# Context variables for request tracking
request_id_ctx: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
operation_ctx: ContextVar[Optional[str]] = ContextVar('operation', default=None)

TEXT_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-30s | [%(request_id)s] [%(operation)s] | %(message)s'
NOISY_LOGGERS = ('httpx', 'httpcore', 'asyncio', 'uvicorn.access')


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def __init__(self, include_traceback: bool = True):
        super().__init__()
        self.include_traceback = include_traceback

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'function': record.funcName,
            'line': record.lineno,
        }

        request_id = request_id_ctx.get()
        operation = operation_ctx.get()
        if request_id:
            log_data['request_id'] = request_id
        if operation:
            log_data['operation'] = operation

        if record.exc_info and self.include_traceback:
            exc_type, exc_value, _ = record.exc_info
            log_data['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': traceback.format_exception(*record.exc_info),
            }

        extra_fields = getattr(record, 'extra_fields', None)
        if extra_fields:
            log_data['extra'] = extra_fields

        return json.dumps(log_data, default=str)


class ContextFilter(logging.Filter):
    """Copies request and operation context onto the record for text output."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or '-'
        record.operation = operation_ctx.get() or '-'
        return True


class StructuredLogger:
    """
    Thin wrapper over ``logging.Logger``.

    ``logger.info("Copied", kind="media", files=12)`` logs the message with
    ``{"kind": "media", "files": 12}`` as ``extra_fields``. ``exc_info`` is
    passed through unchanged.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def log(self, level: int, message: str, **fields: Any) -> None:
        exc_info = fields.pop('exc_info', None)
        extra = {'extra_fields': fields} if fields else None
        self._logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **fields: Any) -> None:
        self.log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self.log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.log(logging.ERROR, message, **fields)

    def critical(self, message: str, **fields: Any) -> None:
        self.log(logging.CRITICAL, message, **fields)

    def exception(self, message: str, **fields: Any) -> None:
        fields['exc_info'] = True
        self.log(logging.ERROR, message, **fields)


def _handler(handler: logging.Handler, formatter: logging.Formatter) -> logging.Handler:
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    return handler


def configure_logging(
    level: str = "INFO",
    format_type: str = "json",
    log_file: Optional[Path] = None,
    enable_console: bool = True,
    module_levels: Optional[Dict[str, str]] = None
) -> None:
    """
    Replace the root logger's handlers.

    Args:
        level: Default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" or "text"
        log_file: Optional file that receives the same records as the console
        enable_console: Log to stdout
        module_levels: Per-logger levels, e.g. {"core.storage.migration": "DEBUG"}
    """
    if format_type == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    handlers: List[logging.Handler] = []
    if enable_console:
        handlers.append(_handler(logging.StreamHandler(sys.stdout), formatter))
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(_handler(logging.FileHandler(log_file, encoding='utf-8'), formatter))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers = handlers

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for name, module_level in (module_levels or {}).items():
        logging.getLogger(name).setLevel(getattr(logging, module_level.upper(), logging.INFO))


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(name)


# =============================================================================
# Context
# =============================================================================

def set_request_context(request_id: Optional[str] = None) -> None:
    """Set the request id for the current context."""
    if request_id:
        request_id_ctx.set(request_id)


def clear_request_context() -> None:
    request_id_ctx.set(None)
    operation_ctx.set(None)


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()


def get_operation() -> Optional[str]:
    """Name of the storage operation running in the current context."""
    return operation_ctx.get()


@contextmanager
def operation_context(operation: str) -> Iterator[None]:
    """Tag every log line emitted inside the block with ``operation``."""
    token = operation_ctx.set(operation)
    try:
        yield
    finally:
        operation_ctx.reset(token)


# =============================================================================
# Presets
# =============================================================================

LOGGING_PRESETS: Dict[str, Dict[str, Any]] = {
    'development': {
        'level': 'INFO',
        'format_type': 'text',
    },
    'production': {
        'level': 'INFO',
        'format_type': 'json',
    },
    'testing': {
        'level': 'WARNING',
        'format_type': 'text',
    },
}


def configure_from_preset(preset: str = 'development', **overrides: Any) -> None:
    """
    Configure logging from a named preset.

    Args:
        preset: 'development', 'production' or 'testing'
        **overrides: Values passed to configure_logging() instead of the preset's
    """
    if preset not in LOGGING_PRESETS:
        raise ValueError(f"Unknown preset: {preset}. Available: {list(LOGGING_PRESETS.keys())}")

    config = dict(LOGGING_PRESETS[preset])
    config.update(overrides)
    configure_logging(**config)
