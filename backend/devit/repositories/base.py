"""Shared persistence helpers for the devit repositories.

Repositories only read and stage rows. They flush so that constraint
violations surface inside the caller's transaction, but they never commit or
roll back: the unit of work owns that.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from devit.core.extensions import db

E = TypeVar("E")  # mapped entity

Column = InstrumentedAttribute[Any]


def apply_sorting(
    stmt: Select[Any],
    sortable: Mapping[str, Column],
    tokens: Iterable[str],
    *,
    tiebreaker: Column | None = None,
) -> Select[Any]:
    """Order ``stmt`` by whitelisted public keys.

    :param stmt: Select to extend.
    :param sortable: Public key to column mapping; other keys are ignored.
    :param tokens: Keys such as ``"number"`` or ``"-created_at"`` (descending).
    :param tiebreaker: Column appended last so the order is total.
    :returns: The ordered select.
    """
    for token in tokens:
        descending = token.startswith("-")
        column = sortable.get(token.lstrip("-").strip())
        if column is not None:
            stmt = stmt.order_by(column.desc() if descending else column.asc())
    if tiebreaker is not None:
        stmt = stmt.order_by(tiebreaker.desc())
    return stmt


class BaseRepository(Generic[E]):
    """Persistence for one mapped model.

    Subclasses set :attr:`model` and may widen the three whitelists below.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """The unit of work's session, or the Flask-scoped one outside of it."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    def _sortable_fields(self) -> Mapping[str, Column]:
        return {}

    def _filterable_fields(self) -> Mapping[str, Column]:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    def _primary_key(self) -> Column:
        return cast(Column, self.model.id)  # type: ignore[attr-defined]

    def add(self, instance: E) -> E:
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any, *, for_update: bool = False) -> E | None:
        """Fetch by primary key, optionally holding the row lock until the transaction ends."""
        stmt = select(self.model).where(self._primary_key() == entity_id)
        if for_update:
            stmt = stmt.with_for_update()
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    def update(self, instance: E, **fields: Any) -> E:
        """Assign whitelisted attributes and flush.

        ``setattr`` is used so ``@validates`` hooks on the model still run.

        :raises ValueError: If a key is not in :meth:`_updatable_fields`.
        """
        unknown = sorted(set(fields) - self._updatable_fields())
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        for key, value in fields.items():
            setattr(instance, key, value)
        self.flush()
        return instance

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> list[E]:
        """Rows matching whitelisted equality ``filters`` (``None`` values skipped)."""
        stmt = select(self.model)
        allowed = self._filterable_fields()
        for key, value in (filters or {}).items():
            if key in allowed and value is not None:
                stmt = stmt.where(allowed[key] == value)
        stmt = apply_sorting(stmt, self._sortable_fields(), sort, tiebreaker=self._primary_key())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars().all())
