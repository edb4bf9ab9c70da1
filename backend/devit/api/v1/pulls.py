"""Pull-request endpoints under ``/repos/<owner>/<name>/pulls``."""

from __future__ import annotations

from flask import Blueprint, request

from devit.api.deps import call, current_identity, json_response, require_auth, timing
from devit.schemas import (
    MergeSchema,
    PullRequestCreateSchema,
    PullRequestSchema,
    PullRequestUpdateSchema,
    StatusQuerySchema,
)
from devit.services.pull_requests.dto import PullRequestCreateIn, PullRequestUpdateIn
from devit.services.pull_requests.service import PullRequestService

bp = Blueprint("pulls", __name__)

pr_schema = PullRequestSchema()
pr_list_schema = PullRequestSchema(many=True)
pr_create_schema = PullRequestCreateSchema()
pr_update_schema = PullRequestUpdateSchema()
merge_schema = MergeSchema()
status_query_schema = StatusQuerySchema()


@bp.get("/<owner>/<name>/pulls")
@timing
def list_pulls(owner: str, name: str):
    """List pull requests; ``?status=open|closed|merged`` filters."""

    query = status_query_schema.load(request.args)
    rows = call(PullRequestService().list, owner, name, status=query["status"])
    return json_response({"data": pr_list_schema.dump(rows)})


@bp.post("/<owner>/<name>/pulls")
@require_auth
@timing
def create_pull(owner: str, name: str):
    data = pr_create_schema.load(request.get_json(silent=True) or {})
    out = call(
        PullRequestService().create,
        current_identity().id,
        owner,
        name,
        PullRequestCreateIn(**data),
    )
    return json_response({"data": pr_schema.dump(out)}, status=201)


@bp.get("/<owner>/<name>/pulls/<int:number>")
@timing
def get_pull(owner: str, name: str, number: int):
    out = call(PullRequestService().get, owner, name, number)
    return json_response({"data": pr_schema.dump(out)})


@bp.patch("/<owner>/<name>/pulls/<int:number>")
@require_auth
@timing
def update_pull(owner: str, name: str, number: int):
    data = pr_update_schema.load(request.get_json(silent=True) or {})
    out = call(
        PullRequestService().update,
        current_identity().id,
        owner,
        name,
        number,
        PullRequestUpdateIn(**data),
    )
    return json_response({"data": pr_schema.dump(out)})


@bp.put("/<owner>/<name>/pulls/<int:number>/merge")
@require_auth
@timing
def merge_pull(owner: str, name: str, number: int):
    """Merge an open pull request (repository owner only)."""

    data = merge_schema.load(request.get_json(silent=True) or {})
    out = call(
        PullRequestService().merge,
        current_identity().id,
        owner,
        name,
        number,
        commit_message=data["commit_message"],
    )
    body = {"data": pr_schema.dump(out.pull_request), "meta": {"message": out.message}}
    return json_response(body)


@bp.patch("/<owner>/<name>/pulls/<int:number>/close")
@require_auth
@timing
def close_pull(owner: str, name: str, number: int):
    """Close a pull request (author or repository owner)."""

    out = call(PullRequestService().close, current_identity().id, owner, name, number)
    return json_response({"data": pr_schema.dump(out)})


@bp.patch("/<owner>/<name>/pulls/<int:number>/reopen")
@require_auth
@timing
def reopen_pull(owner: str, name: str, number: int):
    """Reopen a closed pull request (author or repository owner)."""

    out = call(PullRequestService().reopen, current_identity().id, owner, name, number)
    return json_response({"data": pr_schema.dump(out)})
