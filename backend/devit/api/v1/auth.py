"""Authentication endpoints using the identity service."""

from __future__ import annotations

from flask import Blueprint, request

from devit.api.deps import call, current_identity, json_response, require_auth, timing
from devit.schemas import LoginSchema, RegisterSchema, TokenResponseSchema, WhoAmISchema
from devit.services.identity.dto import LoginIn, RegisterIn
from devit.services.identity.service import IdentityService

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
token_schema = TokenResponseSchema()
whoami_schema = WhoAmISchema()


@bp.post("/register")
@timing
def register():
    """Register a new account and return its first token."""

    data = register_schema.load(request.get_json(silent=True) or {})
    out = call(IdentityService().register, RegisterIn(**data))
    return json_response({"data": token_schema.dump(out)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate by username or email and issue a token."""

    data = login_schema.load(request.get_json(silent=True) or {})
    out = call(IdentityService().authenticate, LoginIn(**data))
    return json_response({"data": token_schema.dump(out)})


@bp.post("/logout")
@timing
def logout():
    """Tokens are stateless; the client discards its copy."""

    return json_response({"data": {"message": "Logged out successfully"}})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the identity behind the bearer token."""

    return json_response({"data": whoami_schema.dump(current_identity())})


@bp.post("/refresh")
@require_auth
@timing
def refresh():
    """Issue a new token with a fresh lifetime for the caller."""

    out = call(IdentityService().refresh_token, current_identity().id)
    return json_response({"data": token_schema.dump(out)})
