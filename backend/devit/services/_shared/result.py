"""
Tagged results for the boundary between the core and its callers.

Services raise :class:`~devit.services._shared.errors.ServiceError`
subclasses internally. Callers outside the core (HTTP handlers, CLI commands)
go through :func:`capture`, which never lets an exception cross: every
outcome becomes a :class:`ServiceResult` carrying either a value or an
:class:`~devit.services._shared.errors.ErrorKind` plus a safe message.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from devit.services._shared.errors import ErrorKind, InternalError, ServiceError

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServiceResult(Generic[T]):
    """
    Success value or error kind, never both.

    :param value: Payload on success.
    :param kind: Error category on failure; ``None`` on success.
    :param message: Human-readable, client-safe message on failure.
    """

    value: T | None = None
    kind: ErrorKind | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind is None

    @classmethod
    def success(cls, value: T) -> ServiceResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> ServiceResult[T]:
        return cls(kind=kind, message=message)

    @classmethod
    def from_error(cls, exc: ServiceError) -> ServiceResult[T]:
        """Build a failure from a service error, hiding detail of internal ones."""
        if exc.kind is ErrorKind.INTERNAL:
            return cls.failure(ErrorKind.INTERNAL, str(InternalError()))
        return cls.failure(exc.kind, str(exc))


def capture(fn: Callable[..., T], *args: Any, **kwargs: Any) -> ServiceResult[T]:
    """
    Run a core operation and turn its outcome into a :class:`ServiceResult`.

    Unexpected exceptions (storage outages, codec bugs) are logged with their
    traceback and reported as an opaque ``INTERNAL`` failure.

    :param fn: Service method to call.
    :param args: Positional arguments for ``fn``.
    :param kwargs: Keyword arguments for ``fn``.
    :returns: Tagged success or failure.
    """
    try:
        return ServiceResult.success(fn(*args, **kwargs))
    except ServiceError as exc:
        if exc.kind is ErrorKind.INTERNAL:
            logger.error("Service failure", exc_info=True, extra={"error_kind": exc.kind.value})
        return ServiceResult.from_error(exc)
    except Exception:
        logger.error(
            "Unexpected failure in %s",
            getattr(fn, "__qualname__", repr(fn)),
            exc_info=True,
            extra={"error_kind": ErrorKind.INTERNAL.value},
        )
        return ServiceResult.failure(ErrorKind.INTERNAL, str(InternalError()))
