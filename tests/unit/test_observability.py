"""Unit tests for structured logging utilities in ``observability``."""

from __future__ import annotations

import logging

import pytest

from lib_typed_dotenv import bind_trace_id, get_logger
from lib_typed_dotenv.observability import TRACE_ID, batch_trace, log_info, log_warning, make_event


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to avoid surprises."""

    logger = get_logger()
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_typed_dotenv")
    bind_trace_id("trace-123")
    try:
        log_info("parse_batch_complete", stage="load", path=None)
    finally:
        bind_trace_id(None)
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "trace-123", "stage": "load", "path": None}


def test_warning_level_is_used(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="lib_typed_dotenv")
    log_warning("file_fetch_failed", stage="fetch", path="/a/.env")
    assert caplog.records[-1].levelno == logging.WARNING


def test_bind_trace_id_clears_context() -> None:
    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    """make_event should merge optional metadata without replacing base keys."""

    assert make_event("cache", None, {"hits": 3}) == {"stage": "cache", "path": None, "hits": 3}
    assert make_event("parse", "/app/.env") == {"stage": "parse", "path": "/app/.env"}
    assert make_event("parse", "/app/.env", {"path": "/other", "line": 3}) == {
        "stage": "parse",
        "path": "/app/.env",
        "line": 3,
    }


def test_batch_trace_binds_and_clears_a_fresh_identifier() -> None:
    with batch_trace() as first:
        assert TRACE_ID.get() == first
    with batch_trace() as second:
        pass

    assert TRACE_ID.get() is None
    assert first != second


def test_batch_trace_reuses_an_outer_binding() -> None:
    bind_trace_id("outer-span")
    try:
        with batch_trace() as trace_id:
            assert trace_id == "outer-span"
        assert TRACE_ID.get() == "outer-span"
    finally:
        bind_trace_id(None)


def test_disabled_levels_are_not_emitted(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="lib_typed_dotenv")
    log_info("cache_stats", stage="cache", path=None)
    assert caplog.records == []
