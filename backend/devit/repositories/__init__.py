"""Persistence layer: one repository per aggregate plus the number allocator."""

from __future__ import annotations

from devit.repositories.account import AccountRepository
from devit.repositories.base import BaseRepository, apply_sorting
from devit.repositories.issue import IssueRepository
from devit.repositories.pull_request import PullRequestRepository
from devit.repositories.repository import RepositoryRepository
from devit.repositories.sequence import SequenceRepository

__all__ = [
    "BaseRepository",
    "apply_sorting",
    "AccountRepository",
    "IssueRepository",
    "PullRequestRepository",
    "RepositoryRepository",
    "SequenceRepository",
]
