"""Tests for request-scoped logging context."""

import json
import logging

import pytest
import structlog
from structlog.contextvars import get_contextvars

from pqgate.logging import (
    bind_query_hash,
    bind_request_context,
    clear_request_context,
    configure_logging,
    generate_request_id,
    get_logger,
)


@pytest.fixture
def restore_logging():
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
    logging.getLogger().setLevel(logging.WARNING)


def test_generate_request_id_format():
    request_id = generate_request_id()

    assert len(request_id) == 14
    assert "=" not in request_id
    assert generate_request_id() != request_id


def test_bind_and_clear_request_context():
    request_id = bind_request_context(query_hash="abc")

    assert get_contextvars() == {"request_id": request_id, "query_hash": "abc"}

    clear_request_context()

    assert get_contextvars() == {}


def test_bind_request_context_starts_fresh():
    bind_request_context(request_id="req-1", query_hash="stale")
    try:
        bind_request_context(request_id="req-2")
        assert get_contextvars() == {"request_id": "req-2"}
    finally:
        clear_request_context()


def test_bind_query_hash_adds_to_context():
    bind_request_context(request_id="req-3")
    try:
        bind_query_hash("hash-3")
        assert get_contextvars() == {"request_id": "req-3", "query_hash": "hash-3"}
    finally:
        clear_request_context()


def test_context_reaches_json_events(capsys, restore_logging):
    configure_logging(log_level="INFO")
    try:
        bind_request_context(request_id="req-4", query_hash="hash-4")
        get_logger("pqgate.test").info("hello", extra_field=1)
    finally:
        clear_request_context()

    event = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert event["event"] == "hello"
    assert event["request_id"] == "req-4"
    assert event["query_hash"] == "hash-4"
    assert event["level"] == "info"


def test_log_level_filters_events(capsys, restore_logging):
    configure_logging(log_level="WARNING")
    get_logger("pqgate.test").info("dropped")
    get_logger("pqgate.test").warning("kept")

    output = capsys.readouterr().out
    assert "dropped" not in output
    assert "kept" in output
