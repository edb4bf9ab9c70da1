"""DTOs for IssueService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class IssueCreateIn:
    """
    Input DTO to open an issue.

    :param title: Required, non-blank.
    :type title: str
    :param body: Optional description.
    :type body: str | None
    """

    title: str
    body: str | None = None


@dataclass(frozen=True, slots=True)
class IssueUpdateIn:
    """
    Partial update. ``None`` leaves a field unchanged.

    :param status: ``OPEN`` or ``CLOSED`` (case-insensitive).
    :type status: str | None
    """

    title: str | None = None
    body: str | None = None
    status: str | None = None


@dataclass(frozen=True, slots=True)
class IssueOut:
    id: int
    repository_id: int
    number: int
    title: str
    body: str | None
    status: str
    author_id: str
    author_username: str
    assignee_id: str | None
    assignee_username: str | None
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None
