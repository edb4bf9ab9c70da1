"""Account profile endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from devit.api.deps import (
    call,
    current_identity,
    json_response,
    optional_identity,
    require_auth,
    timing,
)
from devit.schemas import (
    AccountListQuerySchema,
    AccountSchema,
    ProfileUpdateSchema,
    RepositorySchema,
)
from devit.services.identity.dto import ProfileUpdateIn
from devit.services.identity.service import IdentityService
from devit.services.repositories.service import RepositoryService

bp = Blueprint("users", __name__)

account_schema = AccountSchema()
account_list_schema = AccountSchema(many=True)
account_list_query_schema = AccountListQuerySchema()
profile_update_schema = ProfileUpdateSchema()
repository_list_schema = RepositorySchema(many=True)


@bp.get("")
@timing
def list_users():
    """Page through accounts, or search them with ``?q=``."""

    query = account_list_query_schema.load(request.args)
    needle = (query["q"] or query["search"] or "").strip()
    if needle:
        rows = call(IdentityService().search_accounts, needle, query["limit"])
    else:
        rows = call(IdentityService().list_accounts, query["limit"], query["offset"])
    return json_response({"data": account_list_schema.dump(rows)})


@bp.get("/<username>")
@timing
def get_user(username: str):
    """Return an account's public profile."""

    out = call(IdentityService().get_account_by_username, username)
    return json_response({"data": account_schema.dump(out)})


@bp.patch("/<username>")
@require_auth
@timing
def update_user(username: str):
    """Edit one's own profile."""

    data = profile_update_schema.load(request.get_json(silent=True) or {})
    out = call(
        IdentityService().update_profile,
        current_identity().id,
        username,
        ProfileUpdateIn(**data),
    )
    return json_response({"data": account_schema.dump(out)})


@bp.get("/<username>/repos")
@timing
def list_user_repos(username: str):
    """List an account's repositories; private ones only for the owner."""

    viewer = optional_identity()
    rows = call(
        RepositoryService().list_for_owner,
        username,
        viewer_id=(viewer.id if viewer else None),
    )
    return json_response({"data": repository_list_schema.dump(rows)})
