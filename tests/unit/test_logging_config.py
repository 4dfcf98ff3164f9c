"""
Unit tests for log context binding and formatting.
"""

import json
import logging

from src.logging_config import (
    JsonFormatter,
    LogContextFilter,
    bind_log_context,
    get_log_context,
    reset_log_context,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("test", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogContext:
    def test_bind_and_reset(self):
        token = bind_log_context(request_id="req-1")
        try:
            inner = bind_log_context(user_id="u-1")
            assert get_log_context() == {"request_id": "req-1", "user_id": "u-1"}
            reset_log_context(inner)
            assert get_log_context() == {"request_id": "req-1"}
        finally:
            reset_log_context(token)
        assert get_log_context() == {}

    def test_filter_fills_missing_fields(self):
        record = _record()
        token = bind_log_context(request_id="req-2")
        try:
            assert LogContextFilter().filter(record) is True
        finally:
            reset_log_context(token)
        assert record.request_id == "req-2"
        assert record.user_id == "-"

    def test_explicit_extra_wins_over_context(self):
        record = _record(user_id="from-extra")
        token = bind_log_context(user_id="from-context")
        try:
            LogContextFilter().filter(record)
        finally:
            reset_log_context(token)
        assert record.user_id == "from-extra"


class TestJsonFormatter:
    def test_includes_message_and_extra_fields(self):
        record = _record(user_id="u-3", count=2, request_id="-")
        data = json.loads(JsonFormatter().format(record))
        assert data["msg"] == "hello world"
        assert data["level"] == "WARNING"
        assert data["user_id"] == "u-3"
        assert data["count"] == 2
        assert "request_id" not in data

    def test_non_serializable_extra_is_stringified(self):
        record = _record(user_id=object())
        data = json.loads(JsonFormatter().format(record))
        assert data["user_id"].startswith("<object object")
