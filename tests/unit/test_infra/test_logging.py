"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from koru_service.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    get_log_context,
    remove_from_log_context,
    set_log_context,
)


def _record(message: str = "Event processed", **extra) -> logging.LogRecord:
    record = logging.LogRecord("koru.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestJSONFormatter:
    def test_one_line_with_extras_and_static_fields(self):
        formatter = JSONFormatter(static={"service": "koru-service"})

        line = formatter.format(_record(event_id="abc"))

        data = json.loads(line)
        assert "\n" not in line
        assert data["message"] == "Event processed"
        assert data["level"] == "INFO"
        assert data["service"] == "koru-service"
        assert data["event_id"] == "abc"
        assert data["timestamp"].endswith("Z")

    def test_exception_is_flattened(self):
        formatter = JSONFormatter()
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("koru.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

        data = json.loads(formatter.format(record))

        assert "ValueError: boom" in data["exception"]


@pytest.mark.unit
class TestLogContext:
    def test_filter_injects_context_without_overwriting(self):
        set_log_context(event_id="e-1", msg="overridden")
        record = _record()

        assert ContextInjectingFilter().filter(record)

        assert record.event_id == "e-1"
        assert record.msg == "Event processed"

    def test_remove_keys(self):
        set_log_context(event_id="e-1", operation="settle")
        remove_from_log_context("event_id")
        assert get_log_context() == {"operation": "settle"}
