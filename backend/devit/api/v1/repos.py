"""Repository endpoints addressed by ``<owner>/<name>``."""

from __future__ import annotations

from flask import Blueprint, request

from devit.api.deps import call, current_identity, json_response, require_auth, timing
from devit.schemas import RepositoryCreateSchema, RepositorySchema, RepositoryUpdateSchema
from devit.services.repositories.dto import RepositoryCreateIn, RepositoryUpdateIn
from devit.services.repositories.service import RepositoryService

bp = Blueprint("repos", __name__)

repository_schema = RepositorySchema()
repository_create_schema = RepositoryCreateSchema()
repository_update_schema = RepositoryUpdateSchema()


@bp.post("")
@require_auth
@timing
def create_repo():
    """Create a repository owned by the caller."""

    data = repository_create_schema.load(request.get_json(silent=True) or {})
    out = call(RepositoryService().create, current_identity().id, RepositoryCreateIn(**data))
    return json_response({"data": repository_schema.dump(out)}, status=201)


@bp.get("/<owner>/<name>")
@timing
def get_repo(owner: str, name: str):
    out = call(RepositoryService().get, owner, name)
    return json_response({"data": repository_schema.dump(out)})


@bp.patch("/<owner>/<name>")
@require_auth
@timing
def update_repo(owner: str, name: str):
    """Update repository metadata (owner only)."""

    data = repository_update_schema.load(request.get_json(silent=True) or {})
    out = call(
        RepositoryService().update,
        current_identity().id,
        owner,
        name,
        RepositoryUpdateIn(**data),
    )
    return json_response({"data": repository_schema.dump(out)})


@bp.delete("/<owner>/<name>")
@require_auth
@timing
def delete_repo(owner: str, name: str):
    """Delete a repository (owner only)."""

    call(RepositoryService().delete, current_identity().id, owner, name)
    return json_response({"data": {"message": "Repository deleted successfully"}})
