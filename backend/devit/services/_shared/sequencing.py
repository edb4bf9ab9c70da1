"""Reserve-then-insert for issue and pull-request creation, with bounded retry."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError

from devit.models.repository import Repository, SequenceKind
from devit.services._shared.base import BaseService
from devit.services._shared.errors import ConflictError, violates
from devit.uow.base import UnitOfWork

logger = logging.getLogger(__name__)

Row = TypeVar("Row")
Out = TypeVar("Out")


def allocate_and_insert(
    service: BaseService,
    *,
    kind: SequenceKind,
    entity: str,
    unique_constraint: str,
    locate: Callable[[UnitOfWork], Repository],
    build: Callable[[UnitOfWork, Repository, int], Row],
    present: Callable[[Row], Out],
) -> Out:
    """
    Reserve the next number for ``kind`` and insert the row carrying it.

    Each attempt runs in its own read-write unit of work, so a failed attempt
    rolls back both its reservation and its insert. Only a
    :class:`ConflictError` (the counter was seeded concurrently, or the number
    is already used by a row the counter did not account for) is retried;
    retries resynchronise the counter with ``MAX(number)`` first. Anything
    else propagates on the first failure.

    :param service: Service providing units of work and the retry budget.
    :param kind: Sequence to draw from.
    :param entity: Entity name used in conflict messages.
    :param unique_constraint: Name of the ``(repository_id, number)`` constraint.
    :param locate: Resolves the target repository inside the unit of work.
    :param build: Creates and flushes the row for the reserved number.
    :param present: Converts the stored row to the caller's output type.
    :returns: ``present(row)`` of the committed row.
    :raises ConflictError: When every attempt collided.
    """
    attempts = service.sequence_max_retries
    for attempt in range(1, attempts):
        try:
            return _attempt(service, kind, entity, unique_constraint, locate, build, present, attempt)
        except ConflictError as exc:
            logger.warning(
                "Sequence collision, retrying: %s",
                exc,
                extra={"kind": kind.value, "attempt": attempt},
            )
    return _attempt(service, kind, entity, unique_constraint, locate, build, present, attempts)


def _attempt(
    service: BaseService,
    kind: SequenceKind,
    entity: str,
    unique_constraint: str,
    locate: Callable[[UnitOfWork], Repository],
    build: Callable[[UnitOfWork, Repository, int], Row],
    present: Callable[[Row], Out],
    attempt: int,
) -> Out:
    with service.rw_uow() as uow:
        repository = locate(uow)
        number = uow.sequences.reserve_next_number(repository.id, kind, resync=attempt > 1)
        try:
            row = build(uow, repository, number)
        except IntegrityError as exc:
            if violates(exc, unique_constraint):
                raise ConflictError(entity, f"number {number} is already taken") from exc
            raise
        return present(row)
