"""RFC 7807 problem responses for every error that reaches Flask."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, ClassVar

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from devit.core.logger import ensure_request_id
from devit.services._shared.errors import ErrorKind

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

# Stable machine codes for statuses raised by Flask/werkzeug itself
_CODES_BY_STATUS = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    500: "internal_server_error",
    503: "service_unavailable",
}


def problem_document(
    status: int,
    code: str,
    detail: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 body.

    :param status: HTTP status code.
    :param code: Stable snake_case identifier clients can branch on.
    :param detail: Client-safe, human-readable explanation.
    :param details: Optional structured extras (field errors and the like).
    :returns: The problem dictionary, tagged with the request id.
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        problem["details"] = details
    return problem


def _respond(
    status: int,
    code: str,
    detail: str,
    *,
    details: dict[str, Any] | None = None,
    exc_info: bool = False,
) -> tuple[Response, int]:
    problem = problem_document(status, code, detail, details)
    if status >= 500:
        log.error("%s %s: %s", status, code, detail, exc_info=exc_info)
    else:
        log.warning("%s %s: %s", status, code, detail)
    response = jsonify(problem)
    response.mimetype = PROBLEM_MIMETYPE
    return response, status


class APIError(Exception):
    """
    An error the API answers with a problem document.

    Subclasses fix the status, the machine code and a default message; the
    ones tied to a service :class:`ErrorKind` declare it so a failed
    :class:`~devit.services._shared.result.ServiceResult` can be turned into
    the matching error with :meth:`for_kind`.
    """

    status_code: ClassVar[int] = HTTPStatus.BAD_REQUEST
    code: ClassVar[str] = "bad_request"
    default_message: ClassVar[str] = "Bad request"
    kind: ClassVar[ErrorKind | None] = None

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    @classmethod
    def for_kind(cls, kind: ErrorKind, message: str | None = None) -> APIError:
        for error_cls in cls.__subclasses__():
            if error_cls.kind is kind:
                return error_cls(message)
        return InternalServerError()


class BadRequest(APIError):
    code = "validation_error"
    kind = ErrorKind.VALIDATION


class Unauthorized(APIError):
    status_code = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"
    default_message = "Unauthorized"
    kind = ErrorKind.INVALID_CREDENTIALS


class Forbidden(APIError):
    status_code = HTTPStatus.FORBIDDEN
    code = "forbidden"
    default_message = "Forbidden"
    kind = ErrorKind.FORBIDDEN


class NotFound(APIError):
    status_code = HTTPStatus.NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"
    kind = ErrorKind.NOT_FOUND


class Conflict(APIError):
    status_code = HTTPStatus.CONFLICT
    code = "conflict"
    default_message = "Conflict"
    kind = ErrorKind.CONFLICT


class InternalServerError(APIError):
    """Storage or codec failure. The message never carries server-side detail."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    code = "internal_server_error"
    default_message = "Internal server error"
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(None)


def init_app(app: Flask) -> None:
    """Register the problem+json handlers; 5xx are logged with tracebacks."""

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return _respond(int(err.status_code), err.code, err.message, details=err.details or None)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _CODES_BY_STATUS.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or code.replace("_", " ").capitalize()).strip()
        return _respond(status, code, detail)

    @app.errorhandler(MarshmallowValidationError)
    def handle_schema_error(err: MarshmallowValidationError):
        return _respond(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            details={"errors": err.messages},
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Raw constraint text stays in the log
        log.info("Unmapped integrity error: %s", err.orig)
        return _respond(HTTPStatus.CONFLICT, "conflict", "Resource conflict")

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        # Statement timeouts, dropped connections, lock waits
        return _respond(
            HTTPStatus.SERVICE_UNAVAILABLE,
            "service_unavailable",
            "Service temporarily unavailable",
            exc_info=True,
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        return _respond(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "internal_server_error",
            "Unexpected error",
            exc_info=True,
        )
