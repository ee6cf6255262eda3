"""
Unit Tests: Monitoring

Tests for structured logging, request/operation context and presets.
"""

import json
import logging
import sys

import pytest

from monitoring import (
    ContextFilter,
    JSONFormatter,
    clear_request_context,
    configure_from_preset,
    get_logger,
    get_operation,
    get_request_id,
    operation_context,
    set_request_context,
)


def make_record(message="hello", **attrs):
    record = logging.LogRecord("test", logging.INFO, __file__, 1, message, None, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def clean_context():
    clear_request_context()
    yield
    clear_request_context()


class TestLogging:
    """Test logger usage."""

    def test_get_logger(self):
        logger = get_logger("test_module")

        assert logger.name == "test_module"

    def test_keyword_fields_become_extra(self, caplog):
        logger = get_logger("tests.structured")

        with caplog.at_level(logging.INFO, logger="tests.structured"):
            logger.info("Copied entries", count=3, kind="projects")

        record = caplog.records[-1]
        assert record.getMessage() == "Copied entries"
        assert record.extra_fields == {"count": 3, "kind": "projects"}

    def test_exc_info_is_passed_through(self, caplog):
        logger = get_logger("tests.structured")

        with caplog.at_level(logging.ERROR, logger="tests.structured"):
            try:
                raise OSError("boom")
            except OSError:
                logger.error("Copy failed", exc_info=True)

        record = caplog.records[-1]
        assert record.exc_info[0] is OSError
        assert not hasattr(record, "extra_fields")

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            configure_from_preset("staging")


class TestContext:
    """Test request and operation context."""

    def test_request_context(self):
        set_request_context("req-1")

        assert get_request_id() == "req-1"

        clear_request_context()
        assert get_request_id() is None

    def test_operation_context_is_scoped(self):
        assert get_operation() is None

        with operation_context("import-data"):
            assert get_operation() == "import-data"
            with operation_context("clear-cache"):
                assert get_operation() == "clear-cache"
            assert get_operation() == "import-data"

        assert get_operation() is None

    def test_context_filter_defaults(self):
        record = make_record()

        assert ContextFilter().filter(record) is True
        assert record.request_id == "-"
        assert record.operation == "-"

    def test_context_filter_values(self):
        set_request_context("req-2")
        record = make_record()

        with operation_context("move-data"):
            ContextFilter().filter(record)

        assert record.request_id == "req-2"
        assert record.operation == "move-data"


class TestJSONFormatter:
    """Test JSON output."""

    def test_format_includes_context_and_extra(self):
        set_request_context("req-3")
        record = make_record("Moved storage", extra_fields={"target": "/data"})

        with operation_context("move-data"):
            data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Moved storage"
        assert data["level"] == "INFO"
        assert data["request_id"] == "req-3"
        assert data["operation"] == "move-data"
        assert data["extra"] == {"target": "/data"}
        assert data["timestamp"].endswith("Z")

    def test_format_exception(self):
        try:
            raise OSError("disk full")
        except OSError:
            record = logging.LogRecord("test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert data["exception"]["type"] == "OSError"
        assert data["exception"]["message"] == "disk full"
