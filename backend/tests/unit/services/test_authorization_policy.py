"""Decision table tests for the ownership gates."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from devit.services._shared.base import BaseService
from devit.services._shared.errors import ForbiddenError
from devit.services._shared.policies.authorization import Action, Resource, ResourceKind, can
from devit.services._shared.policies.common import is_owner

OWNER = "user_owner"
AUTHOR = "user_author"
STRANGER = "user_stranger"

repository = SimpleNamespace(owner_id=OWNER)
pull_request = SimpleNamespace(author_id=AUTHOR)
account = SimpleNamespace(id=OWNER)


@pytest.mark.parametrize(
    ("resource", "action", "allowed"),
    [
        (Resource.of_repository(repository), Action.UPDATE, {OWNER}),
        (Resource.of_repository(repository), Action.DELETE, {OWNER}),
        (Resource.of_pull_request(pull_request, repository), Action.MERGE, {OWNER}),
        (Resource.of_pull_request(pull_request, repository), Action.CLOSE, {OWNER, AUTHOR}),
        (Resource.of_pull_request(pull_request, repository), Action.REOPEN, {OWNER, AUTHOR}),
        (Resource.of_account(account), Action.UPDATE, {OWNER}),
    ],
)
def test_decision_table(resource, action, allowed):
    for actor in (OWNER, AUTHOR, STRANGER):
        assert can(actor, resource, action) is (actor in allowed), actor


def test_anonymous_actor_is_always_denied():
    for action in Action:
        assert not can(None, Resource.of_repository(repository), action)


def test_unlisted_pairs_are_denied():
    assert not can(OWNER, Resource.of_repository(repository), Action.MERGE)
    assert not can(OWNER, Resource.of_account(account), Action.DELETE)


def test_pull_request_author_is_not_repository_owner():
    resource = Resource.of_pull_request(pull_request, repository)

    assert resource.kind is ResourceKind.PULL_REQUEST
    assert resource.owner_id == OWNER
    assert resource.author_id == AUTHOR


def test_is_owner_ignores_missing_ids():
    assert is_owner(actor_id=OWNER, owner_id=OWNER)
    assert not is_owner(actor_id=None, owner_id=OWNER)
    assert not is_owner(actor_id=OWNER, owner_id=None)


def test_ensure_allowed_raises_forbidden_with_message():
    service = BaseService()
    resource = Resource.of_repository(repository)

    assert service.ensure_allowed(OWNER, resource, Action.DELETE) is None
    with pytest.raises(ForbiddenError, match="You are not allowed to delete this repository"):
        service.ensure_allowed(STRANGER, resource, Action.DELETE)
    with pytest.raises(ForbiddenError, match="custom"):
        service.ensure_allowed(STRANGER, resource, Action.DELETE, msg="custom")
