"""Shared base for rows numbered inside a repository (issues, pull requests)."""

from __future__ import annotations

from typing import Any, TypeVar, cast

from sqlalchemy import select

from devit.models.issue import Issue
from devit.models.pull_request import PullRequest
from devit.repositories.base import BaseRepository

N = TypeVar("N", Issue, PullRequest)


class NumberedRepository(BaseRepository[N]):
    """Lookups by ``(repository_id, number)``.

    Numbers are handed out by :class:`~devit.repositories.sequence.SequenceRepository`;
    this class only reads and writes the numbered rows themselves.
    """

    def _sortable_fields(self):
        return {
            "number": self.model.number,
            "created_at": self.model.created_at,
            "updated_at": self.model.updated_at,
        }

    def _filterable_fields(self):
        return {
            "repository_id": self.model.repository_id,
            "status": self.model.status,
            "author_id": self.model.author_id,
        }

    def get_by_number(
        self, repository_id: int, number: int, *, for_update: bool = False
    ) -> N | None:
        """Fetch one row by its per-repository number.

        :param repository_id: Owning repository.
        :param number: Sequence number within that repository.
        :param for_update: Lock the row for the rest of the transaction.
        """
        stmt = select(self.model).where(
            self.model.repository_id == repository_id, self.model.number == number
        )
        if for_update:
            stmt = stmt.with_for_update(of=self.model)
        return cast(N | None, self.session.execute(stmt).scalars().first())

    def list_for_repository(self, repository_id: int, *, status: Any = None) -> list[N]:
        """Rows of one repository, newest number first."""
        return self.list(
            filters={"repository_id": repository_id, "status": status},
            sort=["-number"],
        )
