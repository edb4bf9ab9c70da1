"""DTOs for RepositoryService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class RepositoryCreateIn:
    """
    Input DTO to create a repository under the caller's account.

    :param name: Repository name, unique per owner.
    :type name: str
    :param description: Optional free text.
    :type description: str | None
    :param is_private: Hide from other accounts' listings.
    :type is_private: bool
    """

    name: str
    description: str | None = None
    is_private: bool = False
    default_branch: str | None = None
    language: str | None = None


@dataclass(frozen=True, slots=True)
class RepositoryUpdateIn:
    """Partial update. ``None`` leaves a field unchanged."""

    name: str | None = None
    description: str | None = None
    is_private: bool | None = None
    is_archived: bool | None = None
    default_branch: str | None = None


@dataclass(frozen=True, slots=True)
class RepositoryOut:
    """Output projection of a repository, addressed as ``owner/name``."""

    id: int
    owner_id: str
    owner_username: str
    name: str
    full_name: str
    description: str | None
    is_private: bool
    is_archived: bool
    is_fork: bool
    default_branch: str
    language: str | None
    star_count: int
    fork_count: int
    watch_count: int
    created_at: datetime
    updated_at: datetime
