"""Pull-request schemas."""

from __future__ import annotations

from marshmallow import fields

from .base import BaseSchema


class PullRequestSchema(BaseSchema):
    """Serialize pull requests for API responses."""

    id = fields.Int(dump_only=True)
    repository_id = fields.Int(dump_only=True)
    number = fields.Int(dump_only=True)
    title = fields.String()
    body = fields.String(allow_none=True)
    status = fields.String(dump_only=True)
    author_id = fields.String(dump_only=True)
    author = fields.String(attribute="author_username", dump_only=True)
    base_branch = fields.String()
    head_branch = fields.String()
    is_merged = fields.Boolean(dump_only=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)
    merged_at = fields.DateTime(allow_none=True, dump_only=True)
    closed_at = fields.DateTime(allow_none=True, dump_only=True)


class PullRequestCreateSchema(BaseSchema):
    title = fields.String(load_default="")
    body = fields.String(load_default=None, allow_none=True)
    base_branch = fields.String(load_default="")
    head_branch = fields.String(load_default="")


class PullRequestUpdateSchema(BaseSchema):
    title = fields.String()
    body = fields.String()


class MergeSchema(BaseSchema):
    """Optional merge commit message."""

    commit_message = fields.String(load_default=None, allow_none=True)
