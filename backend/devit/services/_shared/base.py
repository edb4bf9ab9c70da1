# devit/services/_shared/base.py
from __future__ import annotations

from flask import current_app, has_app_context

from devit.services._shared.errors import ForbiddenError
from devit.services._shared.policies.authorization import Action, Resource, can
from devit.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

DEFAULT_SEQUENCE_MAX_RETRIES = 3


class BaseService:
    """
    Common plumbing for the devit services.

    Notes
    -----
    * Every database access goes through a unit of work from :meth:`rw_uow`
      or :meth:`ro_uow`; services never commit on ``db.session`` themselves.
    * Mutations of owned resources pass :meth:`ensure_allowed` first.
    * Failures are raised as :class:`~devit.services._shared.errors.ServiceError`
      subclasses, never as HTTP errors.
    """

    READ_ISOLATION = "READ COMMITTED"

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        return SQLAlchemyReadOnlyUnitOfWork(isolation_level=self.READ_ISOLATION)

    @property
    def sequence_max_retries(self) -> int:
        """Attempts allowed when a freshly reserved number collides (``SEQUENCE_MAX_RETRIES``)."""
        if not has_app_context():
            return DEFAULT_SEQUENCE_MAX_RETRIES
        return max(1, int(current_app.config.get("SEQUENCE_MAX_RETRIES", DEFAULT_SEQUENCE_MAX_RETRIES)))

    def ensure_allowed(
        self,
        actor_id: str | None,
        resource: Resource,
        action: Action,
        *,
        msg: str | None = None,
    ) -> None:
        """
        Raise unless ``actor_id`` may perform ``action`` on ``resource``.

        :param actor_id: Authenticated account id, ``None`` when anonymous.
        :param resource: Facts about the already-fetched target.
        :param action: Requested mutation.
        :param msg: Message overriding the generic one.
        :raises ForbiddenError: If the decision table denies it.
        """
        if not can(actor_id, resource, action):
            target = resource.kind.value.replace("_", " ")
            raise ForbiddenError(msg or f"You are not allowed to {action.value} this {target}")
