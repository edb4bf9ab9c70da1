"""Idempotent demo data for local development, created through the services."""

from __future__ import annotations

import logging
from collections import defaultdict

from devit.services._shared.errors import NotFoundError
from devit.services.identity.dto import RegisterIn
from devit.services.identity.service import IdentityService
from devit.services.issues.dto import IssueCreateIn
from devit.services.issues.service import IssueService
from devit.services.pull_requests.dto import PullRequestCreateIn
from devit.services.pull_requests.service import PullRequestService
from devit.services.repositories.dto import RepositoryCreateIn
from devit.services.repositories.service import RepositoryService

LOGGER = logging.getLogger(__name__)

Summary = dict[str, dict[str, int]]

ACCOUNT_FIXTURES: list[dict[str, str]] = [
    {
        "username": "alice",
        "email": "alice@example.com",
        "password": "password123",
        "full_name": "Alice Example",
    },
    {
        "username": "bob",
        "email": "bob@example.com",
        "password": "password123",
        "full_name": "Bob Example",
    },
]

REPOSITORY_FIXTURES: list[dict[str, str]] = [
    {"owner": "alice", "name": "proj", "description": "Demo project"},
]

ISSUE_FIXTURES: list[dict[str, str]] = [
    {"author": "alice", "title": "Set up continuous integration"},
    {"author": "bob", "title": "README has a typo", "body": "Second paragraph."},
]

PULL_REQUEST_FIXTURES: list[dict[str, str]] = [
    {"author": "bob", "title": "Fix README typo", "base_branch": "main", "head_branch": "fix-typo"},
]


def _ensure_accounts(summary: Summary) -> dict[str, str]:
    identity = IdentityService()
    ids: dict[str, str] = {}
    for fixture in ACCOUNT_FIXTURES:
        try:
            ids[fixture["username"]] = identity.get_account_by_username(fixture["username"]).id
            summary["accounts"]["existing"] += 1
        except NotFoundError:
            out = identity.register(RegisterIn(**fixture))
            ids[fixture["username"]] = out.account.id
            summary["accounts"]["created"] += 1
            LOGGER.debug("Seeded account %s", fixture["username"])
    return ids


def _ensure_repositories(ids: dict[str, str], summary: Summary) -> None:
    service = RepositoryService()
    for fixture in REPOSITORY_FIXTURES:
        try:
            service.get(fixture["owner"], fixture["name"])
            summary["repositories"]["existing"] += 1
        except NotFoundError:
            service.create(
                ids[fixture["owner"]],
                RepositoryCreateIn(name=fixture["name"], description=fixture["description"]),
            )
            summary["repositories"]["created"] += 1


def _ensure_threads(ids: dict[str, str], summary: Summary) -> None:
    """Open the demo issues and pull requests once; numbering is the services' job."""
    owner, name = REPOSITORY_FIXTURES[0]["owner"], REPOSITORY_FIXTURES[0]["name"]

    issues = IssueService()
    if issues.list(owner, name):
        summary["issues"]["existing"] += len(ISSUE_FIXTURES)
    else:
        for fixture in ISSUE_FIXTURES:
            issues.create(
                ids[fixture["author"]],
                owner,
                name,
                IssueCreateIn(title=fixture["title"], body=fixture.get("body")),
            )
            summary["issues"]["created"] += 1

    pulls = PullRequestService()
    if pulls.list(owner, name):
        summary["pull_requests"]["existing"] += len(PULL_REQUEST_FIXTURES)
    else:
        for fixture in PULL_REQUEST_FIXTURES:
            pulls.create(
                ids[fixture["author"]],
                owner,
                name,
                PullRequestCreateIn(
                    title=fixture["title"],
                    base_branch=fixture["base_branch"],
                    head_branch=fixture["head_branch"],
                ),
            )
            summary["pull_requests"]["created"] += 1


def run_all(*, verbose: bool = False) -> Summary:
    """Create the demo dataset, skipping whatever already exists.

    :param verbose: Log each created row at DEBUG.
    :returns: ``{table: {"created": n, "existing": m}}``.
    """
    if verbose:
        LOGGER.setLevel(logging.DEBUG)
    summary: Summary = defaultdict(lambda: {"created": 0, "existing": 0})
    ids = _ensure_accounts(summary)
    _ensure_repositories(ids, summary)
    _ensure_threads(ids, summary)
    return dict(summary)
