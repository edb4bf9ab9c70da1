"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic**: they never import Flask or HTTP
concerns. Each carries an :class:`ErrorKind` so the boundary
(:mod:`devit.services._shared.result`) and the transport layer can map them
uniformly without ``isinstance`` ladders.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import IntegrityError

from devit.core.extensions import metadata


class ErrorKind(str, Enum):
    """Closed set of failure categories exposed by the core."""

    VALIDATION = "validation"
    INVALID_CREDENTIALS = "invalid_credentials"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


def _sqlite_signature(constraint_name: str) -> str | None:
    """Return SQLite's ``table.col, table.col`` rendering of a named unique constraint."""
    for table in metadata.tables.values():
        for constraint in table.constraints:
            if isinstance(constraint, UniqueConstraint) and constraint.name == constraint_name:
                return ", ".join(f"{table.name}.{col.name}" for col in constraint.columns)
    return None


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific unique constraint.

    PostgreSQL reports the constraint name; SQLite reports the constrained
    columns (``UNIQUE constraint failed: issues.repository_id, issues.number``),
    so both renderings are matched.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Name of the constraint (e.g. ``uq_accounts_email``).
    :returns: ``True`` if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else str(exc).lower()
    if constraint_name.lower() in message:
        return True
    signature = _sqlite_signature(constraint_name)
    return bool(signature) and f"failed: {signature.lower()}" in message


# --------------------------------------------------------------------------- #
# Base type
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    """

    kind: ErrorKind = ErrorKind.INTERNAL


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """Malformed or missing input. The caller's fault; never retried."""

    kind = ErrorKind.VALIDATION


class InvalidCredentialsError(ServiceError):
    """
    Authentication failed.

    The message is deliberately the same whether the account is unknown or
    the password is wrong.
    """

    kind = ErrorKind.INVALID_CREDENTIALS

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class ForbiddenError(ServiceError):
    """Authenticated, but not allowed to perform the action."""

    kind = ErrorKind.FORBIDDEN

    def __init__(self, message: str = "You are not allowed to perform this action") -> None:
        super().__init__(message)


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., "Account").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    kind = ErrorKind.NOT_FOUND

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or state-transition conflict occurs.

    :param entity: Entity name (e.g., "Account").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    kind = ErrorKind.CONFLICT

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class InternalError(ServiceError):
    """Storage or codec failure. Surfaced opaquely; detail stays in the logs."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
