"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from devit.core.logger import REQUEST_ID_HEADER, JSONFormatter, configure_logging


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    configure_logging("DEBUG")
    try:
        assert logging.getLogger().level == logging.DEBUG
    finally:
        configure_logging("WARNING")


def test_json_formatter_promotes_known_extras() -> None:
    record = logging.LogRecord("devit.test", logging.INFO, __file__, 1, "Issue created", None, None)
    record.account_id = "user_1"
    record.number = 7
    record.secret = "never shown"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Issue created"
    assert payload["level"] == "INFO"
    assert payload["account_id"] == "user_1"
    assert payload["number"] == 7
    assert "secret" not in payload


def test_request_id_is_echoed(client) -> None:
    resp = client.get("/api/v1/health", headers={REQUEST_ID_HEADER: "req-123"})

    assert resp.headers[REQUEST_ID_HEADER] == "req-123"


def test_request_id_is_generated_when_absent_or_unusable(client) -> None:
    generated = client.get("/api/v1/health")
    rejected = client.get("/api/v1/health", headers={REQUEST_ID_HEADER: "x" * 200})

    assert len(generated.headers[REQUEST_ID_HEADER]) == 32
    assert rejected.headers[REQUEST_ID_HEADER] != "x" * 200
    assert generated.headers[REQUEST_ID_HEADER] != rejected.headers[REQUEST_ID_HEADER]
