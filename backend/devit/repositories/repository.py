"""Persistence for code repositories addressed by ``owner/name``."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from devit.models.account import Account
from devit.models.repository import Repository
from devit.repositories.base import BaseRepository


class RepositoryRepository(BaseRepository[Repository]):
    """Persistence-only repository for :class:`Repository`."""

    model = Repository

    def _sortable_fields(self):
        return {
            "name": Repository.name,
            "created_at": Repository.created_at,
            "updated_at": Repository.updated_at,
        }

    def _filterable_fields(self):
        return {
            "owner_id": Repository.owner_id,
            "is_private": Repository.is_private,
        }

    def _updatable_fields(self):
        return {"name", "description", "is_private", "is_archived", "default_branch"}

    def get_by_owner_and_name(
        self, owner_username: str, name: str, *, for_update: bool = False
    ) -> Repository | None:
        """Resolve a repository from its public ``owner_username/name`` address.

        :param owner_username: Username of the owning account.
        :param name: Repository name within that account.
        :param for_update: Lock the repository row for the rest of the transaction.
        :returns: Repository or ``None``.
        """
        stmt = (
            select(Repository)
            .join(Account, Repository.owner_id == Account.id)
            .where(Account.username == owner_username, Repository.name == name)
        )
        if for_update:
            stmt = stmt.with_for_update(of=Repository)
        return cast(Repository | None, self.session.execute(stmt).scalars().first())

    def exists_for_owner(self, owner_id: str, name: str) -> bool:
        """Return ``True`` when ``owner_id`` already has a repository called ``name``."""
        stmt = select(Repository.id).where(
            Repository.owner_id == owner_id, Repository.name == name
        )
        return self.session.execute(stmt.limit(1)).first() is not None

    def list_for_owner(self, owner_id: str, *, include_private: bool = True) -> list[Repository]:
        """Owner's repositories, most recently updated first."""
        filters: dict[str, object] = {"owner_id": owner_id}
        if not include_private:
            filters["is_private"] = False
        return self.list(filters=filters, sort=["-updated_at"])
