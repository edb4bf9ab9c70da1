"""DTOs for PullRequestService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class PullRequestCreateIn:
    """
    Input DTO to open a pull request.

    :param title: Required, non-blank.
    :type title: str
    :param base_branch: Branch the changes go into.
    :type base_branch: str
    :param head_branch: Branch the changes come from; must differ from ``base_branch``.
    :type head_branch: str
    :param body: Optional description.
    :type body: str | None
    """

    title: str
    base_branch: str
    head_branch: str
    body: str | None = None


@dataclass(frozen=True, slots=True)
class PullRequestUpdateIn:
    """Title/body edit. ``None`` leaves a field unchanged."""

    title: str | None = None
    body: str | None = None


@dataclass(frozen=True, slots=True)
class PullRequestOut:
    id: int
    repository_id: int
    number: int
    title: str
    body: str | None
    status: str
    author_id: str
    author_username: str
    base_branch: str
    head_branch: str
    is_merged: bool
    created_at: datetime
    updated_at: datetime
    merged_at: datetime | None
    closed_at: datetime | None


@dataclass(frozen=True, slots=True)
class MergeOut:
    """
    Result of a merge.

    :param pull_request: The merged pull request.
    :type pull_request: PullRequestOut
    :param message: Merge commit message (caller's or the default one).
    :type message: str
    """

    pull_request: PullRequestOut
    message: str
