"""Account profile schemas."""

from __future__ import annotations

from marshmallow import fields, validate

from .base import BaseSchema


class AccountSchema(BaseSchema):
    """Serialize the public view of an account. The digest is never a field."""

    id = fields.String(dump_only=True)
    username = fields.String(dump_only=True)
    email = fields.String(dump_only=True)
    full_name = fields.String(allow_none=True)
    bio = fields.String(allow_none=True)
    avatar_url = fields.String(allow_none=True)
    website_url = fields.String(allow_none=True)
    location = fields.String(allow_none=True)
    company = fields.String(allow_none=True)
    is_admin = fields.Boolean(dump_only=True)
    is_verified = fields.Boolean(dump_only=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)


class ProfileUpdateSchema(BaseSchema):
    """Partial profile update; omitted keys stay unchanged."""

    full_name = fields.String(validate=validate.Length(max=100))
    bio = fields.String(validate=validate.Length(max=500))
    avatar_url = fields.String(validate=validate.Length(max=500))
    website_url = fields.String(validate=validate.Length(max=500))
    location = fields.String(validate=validate.Length(max=100))
    company = fields.String(validate=validate.Length(max=100))


class AccountListQuerySchema(BaseSchema):
    """``GET /users`` query: ``?q=`` (or ``?search=``) searches, otherwise pages."""

    q = fields.String(load_default=None)
    search = fields.String(load_default=None)
    limit = fields.Int(load_default=None)
    offset = fields.Int(load_default=None)
