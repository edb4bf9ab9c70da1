"""SQLAlchemy units of work over the Flask-scoped session."""

from __future__ import annotations

import logging

from flask import current_app, has_app_context
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session

from devit.core.extensions import db
from devit.repositories import (
    AccountRepository,
    IssueRepository,
    PullRequestRepository,
    RepositoryRepository,
    SequenceRepository,
)
from devit.uow.base import UnitOfWork

log = logging.getLogger(__name__)

# Dialects with SET LOCAL statement_timeout / SET TRANSACTION READ ONLY
_POSTGRES = "postgresql"

_WRITE_VERBS = frozenset(
    {"insert", "update", "delete", "merge", "replace", "create", "alter", "drop", "truncate"}
)


class ReadOnlyViolation(RuntimeError):
    """A write was attempted inside :class:`SQLAlchemyReadOnlyUnitOfWork`."""


class _Repositories:
    """Every repository bound to one session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.accounts = AccountRepository(session)
        self.repositories = RepositoryRepository(session)
        self.issues = IssueRepository(session)
        self.pull_requests = PullRequestRepository(session)
        self.sequences = SequenceRepository(session)


class SQLAlchemyUnitOfWork(_Repositories, UnitOfWork):
    """
    Read-write scope: commit on clean exit, roll back on any exception.

    Parameters
    ----------
    session:
        Defaults to ``db.session``.
    statement_timeout_ms:
        ``SET LOCAL statement_timeout`` for this transaction on PostgreSQL.
        Defaults to ``DB_STATEMENT_TIMEOUT_MS``; ``0`` turns it off. A
        statement that runs over raises ``OperationalError`` and the whole
        transaction is rolled back, so no half-written rows survive.
    """

    def __init__(
        self,
        *,
        session: Session | None = None,
        statement_timeout_ms: int | None = None,
    ) -> None:
        super().__init__(session if session is not None else db.session)
        if statement_timeout_ms is None:
            statement_timeout_ms = (
                int(current_app.config.get("DB_STATEMENT_TIMEOUT_MS", 0)) if has_app_context() else 0
            )
        self.statement_timeout_ms = max(0, statement_timeout_ms)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        if self.statement_timeout_ms and self.session.get_bind().dialect.name == _POSTGRES:
            self.session.execute(
                text(f"SET LOCAL statement_timeout = {int(self.statement_timeout_ms)}")
            )
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except BaseException:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(_Repositories, UnitOfWork):
    """
    Read scope that refuses to write.

    Two guards stay installed for the lifetime of the scope: a
    ``before_flush`` hook that rejects pending ORM changes, and a
    ``before_cursor_execute`` hook that rejects DML/DDL sent on the
    connection. On PostgreSQL the transaction is additionally declared
    ``READ ONLY`` when this scope opened it.

    If the session is already inside a transaction (an outer fixture, a
    caller that read first) the scope joins it and leaves it open on exit;
    otherwise it rolls back what it began.
    """

    def __init__(self, *, session: Session | None = None, isolation_level: str | None = None) -> None:
        super().__init__(session if session is not None else db.session)
        self.isolation_level = isolation_level
        self._owns_transaction = False
        self._connection: Connection | None = None
        self._flush_guard = lambda session, flush_context, instances: _reject_flush(session)
        self._sql_guard = lambda conn, cursor, statement, *rest: _reject_write_sql(statement)

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        try:
            self.session.begin()
            self._owns_transaction = True
        except InvalidRequestError:
            # Already begun (autobegin or an outer fixture); join it.
            self._owns_transaction = False
        self._connection = self.session.connection()
        event.listen(self.session, "before_flush", self._flush_guard)
        event.listen(self._connection, "before_cursor_execute", self._sql_guard)
        if self._owns_transaction and self._connection.dialect.name == _POSTGRES:
            self._declare_read_only()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_transaction:
                self.session.rollback()
        finally:
            event.remove(self.session, "before_flush", self._flush_guard)
            if self._connection is not None:
                event.remove(self._connection, "before_cursor_execute", self._sql_guard)
            self._connection = None

    def commit(self) -> None:
        raise ReadOnlyViolation("Read-only unit of work does not allow commit()")

    def rollback(self) -> None:
        self.session.rollback()

    def _declare_read_only(self) -> None:
        try:
            if self.isolation_level:
                level = self.isolation_level.strip().upper()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("Could not declare transaction read-only, relying on guards: %s", exc)


def _reject_flush(session: Session) -> None:
    if session.new or session.dirty or session.deleted:
        raise ReadOnlyViolation("Read-only unit of work: ORM flush blocked")


def _reject_write_sql(statement: str) -> None:
    verb = statement.lstrip().split(None, 1)[0].lower() if statement.strip() else ""
    if verb in _WRITE_VERBS:
        raise ReadOnlyViolation(f"Read-only unit of work: SQL statement blocked: {verb.upper()}")
