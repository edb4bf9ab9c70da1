"""Convenience exports for API schemas."""

from __future__ import annotations

from .auth import LoginSchema, RegisterSchema, TokenResponseSchema, WhoAmISchema
from .issue import (
    IssueAssignSchema,
    IssueCreateSchema,
    IssueSchema,
    IssueUpdateSchema,
    StatusQuerySchema,
)
from .pull_request import (
    MergeSchema,
    PullRequestCreateSchema,
    PullRequestSchema,
    PullRequestUpdateSchema,
)
from .repository import RepositoryCreateSchema, RepositorySchema, RepositoryUpdateSchema
from .user import AccountListQuerySchema, AccountSchema, ProfileUpdateSchema

__all__ = [
    "AccountSchema",
    "AccountListQuerySchema",
    "ProfileUpdateSchema",
    "LoginSchema",
    "RegisterSchema",
    "TokenResponseSchema",
    "WhoAmISchema",
    "RepositorySchema",
    "RepositoryCreateSchema",
    "RepositoryUpdateSchema",
    "IssueSchema",
    "IssueCreateSchema",
    "IssueUpdateSchema",
    "IssueAssignSchema",
    "StatusQuerySchema",
    "PullRequestSchema",
    "PullRequestCreateSchema",
    "PullRequestUpdateSchema",
    "MergeSchema",
]
