# tests/test_monitoring.py
"""
Tests for logging, error recording and configuration.
"""
import json
import logging

import pytest
from pydantic import ValidationError

from docresolver.config import Settings
from docresolver.monitoring.context import (
    get_request_context,
    operation_var,
    request_id_var,
    set_request_context,
)
from docresolver.monitoring.errors import record_error
from docresolver.monitoring.logger import JsonFormatter, log


@pytest.fixture
def request_context():
    request_token = request_id_var.set(None)
    operation_token = operation_var.set(None)
    yield
    request_id_var.reset(request_token)
    operation_var.reset(operation_token)


class TestLog:
    def test_module_maps_to_component(self, caplog, request_context):
        with caplog.at_level(logging.INFO, logger="docresolver"):
            log("INFO", "Listing started", module="resolver")

        record = caplog.records[-1]
        assert record.getMessage() == "Listing started"
        assert record.component == "resolver"
        assert record.request_id is None

    def test_context_fills_missing_fields(self, caplog, request_context):
        set_request_context(request_id="req-1", operation="ResolveParent")

        with caplog.at_level(logging.INFO, logger="docresolver"):
            log("WARNING", "No parent", module="resolver")
            log("INFO", "Explicit", module="resolver", request_id="req-2")

        first, second = caplog.records[-2:]
        assert first.levelname == "WARNING"
        assert first.request_id == "req-1"
        assert first.operation == "ResolveParent"
        assert second.request_id == "req-2"
        assert get_request_context() == {"request_id": "req-1", "operation": "ResolveParent"}

    def test_record_error(self, caplog, request_context):
        with caplog.at_level(logging.INFO, logger="docresolver"):
            record_error(
                "router",
                "_resolve_parent",
                "Failed to get parent directory: boom",
                details={"request": "ResolveParent(...)"},
                stacktrace="Traceback ...",
                request_id="req-9",
            )

        record = caplog.records[-1]
        assert record.levelname == "ERROR"
        assert record.component == "router"
        assert record.request_id == "req-9"
        assert record.details == {
            "request": "ResolveParent(...)",
            "function": "_resolve_parent",
            "stacktrace": "Traceback ...",
        }


class TestJsonFormatter:
    def test_formats_record_as_json(self):
        record = logging.LogRecord("docresolver", logging.INFO, __file__, 1, "Converted %s", ("id",), None)
        record.component = "resolver"
        record.request_id = "req-1"
        record.details = {"count": 2}

        payload = json.loads(JsonFormatter().format(record))

        assert payload["level"] == "INFO"
        assert payload["message"] == "Converted id"
        assert payload["component"] == "resolver"
        assert payload["request_id"] == "req-1"
        assert payload["operation"] is None
        assert payload["details"] == {"count": 2}
        assert "timestamp" in payload

    def test_component_defaults_to_module(self):
        record = logging.LogRecord("docresolver", logging.DEBUG, __file__, 1, "plain", None, None)

        payload = json.loads(JsonFormatter().format(record))

        assert payload["component"] == "test_monitoring"
        assert "details" not in payload


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PLATFORM_API_LEVEL", raising=False)

        config = Settings(_env_file=None)

        assert config.EXTERNAL_STORAGE_AUTHORITY == "com.android.externalstorage.documents"
        assert config.DOWNLOADS_AUTHORITY == "com.android.providers.downloads.documents"
        assert config.PLATFORM_API_LEVEL == 30
        assert config.FILESYSTEM_FALLBACK_ENABLED is True

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PLATFORM_API_LEVEL", "29")
        monkeypatch.setenv("SHARED_STORAGE_ROOT", "/sdcard")

        config = Settings(_env_file=None)

        assert config.PLATFORM_API_LEVEL == 29
        assert config.SHARED_STORAGE_ROOT == "/sdcard"

    def test_invalid_api_level(self, monkeypatch):
        monkeypatch.setenv("PLATFORM_API_LEVEL", "0")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)
