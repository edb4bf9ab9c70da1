"""Authentication-related Marshmallow schemas.

Input schemas only check types. Presence and format rules (and the order they
are reported in) belong to the identity service, which answers with a 400.
"""

from __future__ import annotations

from typing import Any

from marshmallow import fields, pre_load

from .base import BaseSchema
from .user import AccountSchema


class RegisterSchema(BaseSchema):
    """Input payload for account registration."""

    username = fields.String(load_default="")
    email = fields.String(load_default="")
    password = fields.String(load_default="")
    full_name = fields.String(load_default=None, allow_none=True)


class LoginSchema(BaseSchema):
    """Input payload for authentication by username or email."""

    username_or_email = fields.String(load_default="")
    password = fields.String(load_default="")

    @pre_load
    def accept_single_handle(self, data: Any, **_: Any) -> Any:
        # Clients may send ``username`` or ``email`` instead of the combined key
        if isinstance(data, dict) and "username_or_email" not in data:
            handle = data.get("username") or data.get("email")
            if handle is not None:
                data = {**data, "username_or_email": handle}
        return data


class TokenResponseSchema(BaseSchema):
    """Response payload for register, login and refresh."""

    token = fields.String(required=True)
    token_type = fields.Constant("Bearer", dump_only=True)
    user = fields.Nested(AccountSchema, attribute="account", dump_only=True)


class WhoAmISchema(BaseSchema):
    """Identity resolved from the bearer token."""

    id = fields.String(required=True)
    username = fields.String(required=True)
    email = fields.String(required=True)
    is_admin = fields.Boolean()
    is_verified = fields.Boolean()
