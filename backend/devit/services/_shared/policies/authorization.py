"""
Ownership gates for mutating operations.

Every rule lives in one decision table keyed by ``(action, resource kind)``.
:func:`can` is pure: callers fetch the rows first and describe them with a
:class:`Resource`; nothing here touches storage.

============  ============  ==========================================
action        resource      allowed when
============  ============  ==========================================
update        repository    actor owns the repository
delete        repository    actor owns the repository
merge         pull request  actor owns the target repository
close         pull request  actor authored it or owns the repository
reopen        pull request  actor authored it or owns the repository
update        account       actor is that account
============  ============  ==========================================

Anything not in the table is denied.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from devit.services._shared.policies.common import is_owner


class Action(str, Enum):
    UPDATE = "update"
    DELETE = "delete"
    MERGE = "merge"
    CLOSE = "close"
    REOPEN = "reopen"


class ResourceKind(str, Enum):
    REPOSITORY = "repository"
    PULL_REQUEST = "pull_request"
    ACCOUNT = "account"


@dataclass(frozen=True, slots=True)
class Resource:
    """
    Already-fetched facts the rules look at.

    :param kind: What the resource is.
    :param owner_id: Owning account (the repository's owner for pull requests,
        the account itself for accounts).
    :param author_id: Author of a pull request; ``None`` otherwise.
    """

    kind: ResourceKind
    owner_id: str | None
    author_id: str | None = None

    @classmethod
    def of_repository(cls, repository: Any) -> Resource:
        return cls(ResourceKind.REPOSITORY, owner_id=repository.owner_id)

    @classmethod
    def of_pull_request(cls, pull_request: Any, repository: Any) -> Resource:
        return cls(
            ResourceKind.PULL_REQUEST,
            owner_id=repository.owner_id,
            author_id=pull_request.author_id,
        )

    @classmethod
    def of_account(cls, account: Any) -> Resource:
        return cls(ResourceKind.ACCOUNT, owner_id=account.id)


Rule = Callable[[str, Resource], bool]


def _owner(actor_id: str, resource: Resource) -> bool:
    return is_owner(actor_id=actor_id, owner_id=resource.owner_id)


def _author_or_owner(actor_id: str, resource: Resource) -> bool:
    return _owner(actor_id, resource) or is_owner(actor_id=actor_id, owner_id=resource.author_id)


RULES: dict[tuple[Action, ResourceKind], Rule] = {
    (Action.UPDATE, ResourceKind.REPOSITORY): _owner,
    (Action.DELETE, ResourceKind.REPOSITORY): _owner,
    (Action.MERGE, ResourceKind.PULL_REQUEST): _owner,
    (Action.CLOSE, ResourceKind.PULL_REQUEST): _author_or_owner,
    (Action.REOPEN, ResourceKind.PULL_REQUEST): _author_or_owner,
    (Action.UPDATE, ResourceKind.ACCOUNT): _owner,
}


def can(actor_id: str | None, resource: Resource, action: Action) -> bool:
    """
    Decide whether ``actor_id`` may perform ``action`` on ``resource``.

    :param actor_id: Authenticated account id; ``None`` for anonymous callers.
    :param resource: Description of the target built from fetched rows.
    :param action: Requested mutation.
    :returns: ``True`` only when a rule exists and grants it.
    """
    if actor_id is None:
        return False
    rule = RULES.get((Action(action), resource.kind))
    return rule is not None and rule(actor_id, resource)
