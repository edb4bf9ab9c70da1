"""Issue repository."""

from __future__ import annotations

from devit.models.issue import Issue
from devit.repositories.numbered import NumberedRepository


class IssueRepository(NumberedRepository[Issue]):
    """Persistence-only repository for :class:`Issue`."""

    model = Issue

    def _updatable_fields(self):
        return {"title", "body", "status", "closed_at", "assignee_id"}
