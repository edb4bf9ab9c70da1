"""Shared API helpers: bearer authentication, result unwrapping, timing."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from devit.core.errors import APIError, InternalServerError, Unauthorized
from devit.infra.jwt.flask_jwt_token_codec import INVALID_TOKEN_MESSAGE
from devit.services._shared.errors import ErrorKind
from devit.services._shared.result import ServiceResult, capture
from devit.services.identity.dto import Identity
from devit.services.identity.service import IdentityService

F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")

BEARER_PREFIX = "Bearer "
MISSING_AUTH_MESSAGE = "Authorization header missing or invalid"


def unwrap(result: ServiceResult[T]) -> T:
    """Return the success value or raise the :class:`APIError` matching its kind."""

    if result.kind is None:
        return result.value  # type: ignore[return-value]
    raise APIError.for_kind(result.kind, result.message)


def call(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a service operation through :func:`capture` and unwrap its result."""

    return unwrap(capture(fn, *args, **kwargs))


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def _bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    if not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None


def _resolve(token: str) -> Identity:
    result = capture(IdentityService().validate_token, token)
    if result.ok:
        return result.value  # type: ignore[return-value]
    if result.kind is ErrorKind.INTERNAL:
        raise InternalServerError()
    # Expired, tampered, or the account is gone: same answer for all of them
    raise Unauthorized(INVALID_TOKEN_MESSAGE)


def require_auth(func: F) -> F:
    """Resolve ``Authorization: Bearer <token>`` into ``g.identity`` or answer 401."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = _bearer_token()
        if token is None:
            raise Unauthorized(MISSING_AUTH_MESSAGE)
        g.identity = _resolve(token)
        g.account_id = g.identity.id
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_identity() -> Identity:
    """Identity stored by :func:`require_auth` for this request."""

    identity = g.get("identity")
    if identity is None:
        raise Unauthorized(MISSING_AUTH_MESSAGE)
    return identity


def optional_identity() -> Identity | None:
    """Identity of the caller when a valid bearer token is present, else ``None``."""

    token = _bearer_token()
    if token is None:
        return None
    result = capture(IdentityService().validate_token, token)
    return result.value if result.ok else None


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
