"""Issue endpoints under ``/repos/<owner>/<name>/issues``."""

from __future__ import annotations

from flask import Blueprint, request

from devit.api.deps import call, current_identity, json_response, require_auth, timing
from devit.schemas import (
    IssueAssignSchema,
    IssueCreateSchema,
    IssueSchema,
    IssueUpdateSchema,
    StatusQuerySchema,
)
from devit.services.issues.dto import IssueCreateIn, IssueUpdateIn
from devit.services.issues.service import IssueService

bp = Blueprint("issues", __name__)

issue_schema = IssueSchema()
issue_list_schema = IssueSchema(many=True)
issue_create_schema = IssueCreateSchema()
issue_update_schema = IssueUpdateSchema()
issue_assign_schema = IssueAssignSchema()
status_query_schema = StatusQuerySchema()


@bp.get("/<owner>/<name>/issues")
@timing
def list_issues(owner: str, name: str):
    """List issues, newest number first; ``?status=OPEN|CLOSED`` filters."""

    query = status_query_schema.load(request.args)
    rows = call(IssueService().list, owner, name, status=query["status"])
    return json_response({"data": issue_list_schema.dump(rows)})


@bp.post("/<owner>/<name>/issues")
@require_auth
@timing
def create_issue(owner: str, name: str):
    data = issue_create_schema.load(request.get_json(silent=True) or {})
    out = call(IssueService().create, current_identity().id, owner, name, IssueCreateIn(**data))
    return json_response({"data": issue_schema.dump(out)}, status=201)


@bp.get("/<owner>/<name>/issues/<int:number>")
@timing
def get_issue(owner: str, name: str, number: int):
    out = call(IssueService().get, owner, name, number)
    return json_response({"data": issue_schema.dump(out)})


@bp.patch("/<owner>/<name>/issues/<int:number>")
@require_auth
@timing
def update_issue(owner: str, name: str, number: int):
    """Edit title, body or status of an issue."""

    data = issue_update_schema.load(request.get_json(silent=True) or {})
    out = call(
        IssueService().update,
        current_identity().id,
        owner,
        name,
        number,
        IssueUpdateIn(**data),
    )
    return json_response({"data": issue_schema.dump(out)})


@bp.post("/<owner>/<name>/issues/<int:number>/assignees")
@require_auth
@timing
def assign_issue(owner: str, name: str, number: int):
    """Assign the issue to ``{"assignee": "<username>"}``; ``null`` unassigns."""

    data = issue_assign_schema.load(request.get_json(silent=True) or {})
    out = call(
        IssueService().assign,
        current_identity().id,
        owner,
        name,
        number,
        data["assignee"],
    )
    return json_response({"data": issue_schema.dump(out)})
