"""Issue schemas."""

from __future__ import annotations

from marshmallow import fields

from .base import BaseSchema


class IssueSchema(BaseSchema):
    """Serialize issues for API responses."""

    id = fields.Int(dump_only=True)
    repository_id = fields.Int(dump_only=True)
    number = fields.Int(dump_only=True)
    title = fields.String()
    body = fields.String(allow_none=True)
    status = fields.String()
    author_id = fields.String(dump_only=True)
    author = fields.String(attribute="author_username", dump_only=True)
    assignee_id = fields.String(allow_none=True, dump_only=True)
    assignee = fields.String(attribute="assignee_username", allow_none=True, dump_only=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)
    closed_at = fields.DateTime(allow_none=True, dump_only=True)


class IssueCreateSchema(BaseSchema):
    title = fields.String(load_default="")
    body = fields.String(load_default=None, allow_none=True)


class IssueUpdateSchema(BaseSchema):
    title = fields.String()
    body = fields.String()
    status = fields.String()


class IssueAssignSchema(BaseSchema):
    """``{"assignee": "<username>"}``; ``null`` unassigns."""

    assignee = fields.String(load_default=None, allow_none=True)


class StatusQuerySchema(BaseSchema):
    """Optional ``?status=`` filter shared by issue and pull-request listings."""

    status = fields.String(load_default=None)
