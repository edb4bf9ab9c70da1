"""JSON logging for devit with per-request correlation.

Every record leaving the root handler is one JSON object. Inside a request
the record also carries the request id (echoed back as ``X-Request-ID``) and
the id of the authenticated account, when there is one.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
MAX_INBOUND_ID_LENGTH = 128

# ``extra={...}`` keys emitted as top-level JSON fields
EXTRA_KEYS = (
    "endpoint",
    "elapsed_ms",
    "account_id",
    "repository_id",
    "kind",
    "number",
    "attempt",
    "error_kind",
)


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        for key in EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp ``request_id`` and, when known, ``account_id`` on each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not has_request_context():
            record.request_id = None
            return True
        record.request_id = ensure_request_id()
        if getattr(record, "account_id", None) is None:
            record.account_id = g.get("account_id")
        return True


def _inbound_request_id() -> str | None:
    for header in INBOUND_ID_HEADERS:
        value = request.headers.get(header, "").strip()
        if value and len(value) <= MAX_INBOUND_ID_LENGTH and value.isprintable():
            return value
    return None


def ensure_request_id() -> str:
    """Request id of the current request; a fresh uuid outside of one."""

    if not has_request_context():
        return uuid4().hex
    request_id = g.get("request_id")
    if request_id is None:
        request_id = _inbound_request_id() or uuid4().hex
        g.request_id = request_id
    return request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Send JSON records to stdout at ``level``, replacing existing root handlers."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
    root.setLevel(level if isinstance(level, int) else logging.INFO)


def init_app(app: Flask) -> None:
    """Open the per-request logging context and echo its id on the response."""

    @app.before_request
    def _open_log_context() -> None:
        # The app context can outlive a request (CLI runner, test client)
        for key in ("request_id", "account_id"):
            g.pop(key, None)
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers[REQUEST_ID_HEADER] = ensure_request_id()
        return response


__all__ = [
    "JSONFormatter",
    "REQUEST_ID_HEADER",
    "RequestContextFilter",
    "configure_logging",
    "ensure_request_id",
    "init_app",
]
