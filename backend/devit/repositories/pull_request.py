"""Pull-request repository."""

from __future__ import annotations

from devit.models.pull_request import PullRequest
from devit.repositories.numbered import NumberedRepository


class PullRequestRepository(NumberedRepository[PullRequest]):
    """Persistence-only repository for :class:`PullRequest`."""

    model = PullRequest

    def _updatable_fields(self):
        return {"title", "body", "status", "closed_at", "merged_at", "is_merged"}
