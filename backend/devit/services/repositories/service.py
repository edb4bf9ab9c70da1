# comments in English; strict reST docstrings
from __future__ import annotations

import logging
import re

from sqlalchemy.exc import IntegrityError

from devit.models.repository import DEFAULT_BRANCH, Repository
from devit.repositories.repository import RepositoryRepository
from devit.services._shared.base import BaseService
from devit.services._shared.errors import ConflictError, NotFoundError, ValidationError, violates
from devit.services._shared.policies.authorization import Action, Resource
from devit.services.repositories.dto import RepositoryCreateIn, RepositoryOut, RepositoryUpdateIn
from devit.uow.base import UnitOfWork

logger = logging.getLogger(__name__)

REPOSITORY_NAME_RE = re.compile(r"^[a-zA-Z0-9._-]{1,100}$")


def require_repository(
    uow: UnitOfWork, owner_username: str, name: str, *, for_update: bool = False
) -> Repository:
    """
    Resolve ``owner_username/name`` inside an open unit of work.

    :raises NotFoundError: When no such repository exists.
    """
    repo = uow.repositories.get_by_owner_and_name(owner_username, name, for_update=for_update)
    if repo is None:
        raise NotFoundError("Repository", f"{owner_username}/{name}")
    return repo


def to_out(repo: Repository) -> RepositoryOut:
    owner_username = repo.owner.username
    return RepositoryOut(
        id=repo.id,
        owner_id=repo.owner_id,
        owner_username=owner_username,
        name=repo.name,
        full_name=f"{owner_username}/{repo.name}",
        description=repo.description,
        is_private=bool(repo.is_private),
        is_archived=bool(repo.is_archived),
        is_fork=bool(repo.is_fork),
        default_branch=repo.default_branch,
        language=repo.language,
        star_count=repo.star_count,
        fork_count=repo.fork_count,
        watch_count=repo.watch_count,
        created_at=repo.created_at,
        updated_at=repo.updated_at,
    )


def _clean_name(raw: str | None) -> str:
    name = (raw or "").strip()
    if not name:
        raise ValidationError("Repository name is required")
    if not REPOSITORY_NAME_RE.fullmatch(name) or name in {".", ".."}:
        raise ValidationError(
            "Repository name may only contain letters, digits, '.', '_' or '-' (max 100)"
        )
    return name


class RepositoryService(BaseService):
    """
    Application service for code repositories.

    Responsibilities
    ----------------
    - Create repositories under the caller's account and seed their issue and
      pull-request counters.
    - Resolve repositories by their ``owner/name`` address.
    - Gate updates and deletion on ownership.

    Notes
    -----
    - ``(owner_id, name)`` uniqueness is checked up front and backed by the
      ``uq_repositories_owner_name`` constraint; both map to
      :class:`ConflictError`.
    """

    # ------------------------------------------------------------------ #
    # Create
    # ------------------------------------------------------------------ #

    def create(self, owner_id: str, dto: RepositoryCreateIn) -> RepositoryOut:
        """
        Create a repository owned by ``owner_id``.

        :param owner_id: Authenticated account creating the repository.
        :type owner_id: str
        :param dto: Creation DTO.
        :type dto: :class:`RepositoryCreateIn`
        :returns: Persisted repository projection.
        :rtype: :class:`RepositoryOut`
        :raises ValidationError: When the name is missing or malformed.
        :raises NotFoundError: When the owner account does not exist.
        :raises ConflictError: When the owner already has a repository with that name.
        """
        name = _clean_name(dto.name)
        default_branch = (dto.default_branch or "").strip() or DEFAULT_BRANCH

        with self.rw_uow() as uow:
            owner = uow.accounts.get(owner_id)
            if owner is None:
                raise NotFoundError("Account", owner_id)

            repos: RepositoryRepository = uow.repositories
            if repos.exists_for_owner(owner.id, name):
                raise ConflictError("Repository", f"{owner.username}/{name} already exists")

            repo = Repository(
                owner=owner,
                name=name,
                description=(dto.description.strip() if dto.description else None),
                is_private=bool(dto.is_private),
                default_branch=default_branch,
                language=dto.language,
            )
            try:
                repos.add(repo)
            except IntegrityError as exc:
                if violates(exc, "uq_repositories_owner_name"):
                    raise ConflictError(
                        "Repository", f"{owner.username}/{name} already exists"
                    ) from exc
                raise
            uow.sequences.seed(repo.id)
            out = to_out(repo)

        logger.info(
            "Repository created",
            extra={"account_id": owner_id, "repository_id": out.id},
        )
        return out

    # ------------------------------------------------------------------ #
    # Read
    # ------------------------------------------------------------------ #

    def get(self, owner_username: str, name: str) -> RepositoryOut:
        """
        Retrieve a repository by its ``owner/name`` address.

        :raises NotFoundError: When it does not exist.
        """
        with self.ro_uow() as uow:
            return to_out(require_repository(uow, owner_username, name))

    def list_for_owner(self, username: str, *, viewer_id: str | None = None) -> list[RepositoryOut]:
        """
        List an account's repositories, most recently updated first.

        Private repositories are only listed to their owner.

        :param username: Owner whose repositories are listed.
        :param viewer_id: Authenticated caller, if any.
        :raises NotFoundError: When the account does not exist.
        """
        with self.ro_uow() as uow:
            owner = uow.accounts.get_by_username(username)
            if owner is None:
                raise NotFoundError("Account", username)
            rows = uow.repositories.list_for_owner(
                owner.id, include_private=(viewer_id == owner.id)
            )
            return [to_out(r) for r in rows]

    # ------------------------------------------------------------------ #
    # Update / Delete
    # ------------------------------------------------------------------ #

    def update(
        self, actor_id: str, owner_username: str, name: str, dto: RepositoryUpdateIn
    ) -> RepositoryOut:
        """
        Update repository metadata. Owner only.

        :raises NotFoundError: When the repository does not exist.
        :raises ForbiddenError: When ``actor_id`` does not own it.
        :raises ValidationError: When a new name or branch is malformed.
        :raises ConflictError: When renaming onto an existing name.
        """
        with self.rw_uow() as uow:
            repos: RepositoryRepository = uow.repositories
            repo = require_repository(uow, owner_username, name, for_update=True)
            self.ensure_allowed(
                actor_id,
                Resource.of_repository(repo),
                Action.UPDATE,
                msg="Unauthorized to update this repository",
            )

            fields: dict[str, object] = {}
            if dto.name is not None:
                new_name = _clean_name(dto.name)
                if new_name != repo.name and repos.exists_for_owner(repo.owner_id, new_name):
                    raise ConflictError(
                        "Repository", f"{owner_username}/{new_name} already exists"
                    )
                fields["name"] = new_name
            if dto.description is not None:
                fields["description"] = dto.description.strip() or None
            if dto.is_private is not None:
                fields["is_private"] = bool(dto.is_private)
            if dto.is_archived is not None:
                fields["is_archived"] = bool(dto.is_archived)
            if dto.default_branch is not None:
                branch = dto.default_branch.strip()
                if not branch:
                    raise ValidationError("Default branch cannot be empty")
                fields["default_branch"] = branch

            if fields:
                try:
                    repos.update(repo, **fields)
                except IntegrityError as exc:
                    if violates(exc, "uq_repositories_owner_name"):
                        raise ConflictError("Repository", "name already exists") from exc
                    raise
            out = to_out(repo)

        logger.info(
            "Repository updated",
            extra={"account_id": actor_id, "repository_id": out.id},
        )
        return out

    def delete(self, actor_id: str, owner_username: str, name: str) -> None:
        """
        Delete a repository with its issues, pull requests and counters. Owner only.

        :raises NotFoundError: When the repository does not exist.
        :raises ForbiddenError: When ``actor_id`` does not own it.
        """
        with self.rw_uow() as uow:
            repo = require_repository(uow, owner_username, name, for_update=True)
            self.ensure_allowed(
                actor_id,
                Resource.of_repository(repo),
                Action.DELETE,
                msg="Unauthorized to delete this repository",
            )
            repo_id = repo.id
            uow.repositories.delete(repo)

        logger.info(
            "Repository deleted",
            extra={"account_id": actor_id, "repository_id": repo_id},
        )
