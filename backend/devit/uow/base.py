"""The transaction scope every service operation runs in."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from devit.repositories import (
        AccountRepository,
        IssueRepository,
        PullRequestRepository,
        RepositoryRepository,
        SequenceRepository,
    )


class UnitOfWork(ABC):
    """
    One database transaction plus the repositories bound to it.

    Used as a context manager. Leaving the block normally makes the work
    durable (read-write scopes) or discards it (read-only scopes); leaving it
    through an exception always discards it.
    """

    accounts: AccountRepository
    repositories: RepositoryRepository
    issues: IssueRepository
    pull_requests: PullRequestRepository
    sequences: SequenceRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
