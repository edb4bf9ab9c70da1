"""Repository schemas."""

from __future__ import annotations

from marshmallow import fields

from .base import BaseSchema


class RepositorySchema(BaseSchema):
    """Serialize repositories for API responses."""

    id = fields.Int(dump_only=True)
    owner_id = fields.String(dump_only=True)
    owner = fields.String(attribute="owner_username", dump_only=True)
    name = fields.String()
    full_name = fields.String(dump_only=True)
    description = fields.String(allow_none=True)
    is_private = fields.Boolean()
    is_archived = fields.Boolean()
    is_fork = fields.Boolean(dump_only=True)
    default_branch = fields.String()
    language = fields.String(allow_none=True)
    star_count = fields.Int(dump_only=True)
    fork_count = fields.Int(dump_only=True)
    watch_count = fields.Int(dump_only=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)


class RepositoryCreateSchema(BaseSchema):
    """Validate repository creation payloads. Name rules are the service's."""

    name = fields.String(load_default="")
    description = fields.String(load_default=None, allow_none=True)
    is_private = fields.Boolean(load_default=False)
    default_branch = fields.String(load_default=None, allow_none=True)
    language = fields.String(load_default=None, allow_none=True)


class RepositoryUpdateSchema(BaseSchema):
    """Partial repository update."""

    name = fields.String()
    description = fields.String()
    is_private = fields.Boolean()
    is_archived = fields.Boolean()
    default_branch = fields.String()
