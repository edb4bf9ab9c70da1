"""
PullRequestService
==================

Pull requests have their own per-repository sequence, independent from
issues: a repository's first pull request is ``#1`` even when issues exist.

State machine::

    open --close--> closed --reopen--> open
    open --merge--> merged   (terminal)
"""

from __future__ import annotations

import logging

from devit.models.base import utcnow
from devit.models.pull_request import PullRequest, PullRequestStatus
from devit.models.repository import Repository, SequenceKind
from devit.services._shared.base import BaseService
from devit.services._shared.errors import ConflictError, NotFoundError, ValidationError
from devit.services._shared.policies.authorization import Action, Resource
from devit.services._shared.sequencing import allocate_and_insert
from devit.services.pull_requests.dto import (
    MergeOut,
    PullRequestCreateIn,
    PullRequestOut,
    PullRequestUpdateIn,
)
from devit.services.repositories.service import require_repository
from devit.uow.base import UnitOfWork

logger = logging.getLogger(__name__)


def to_out(pr: PullRequest) -> PullRequestOut:
    return PullRequestOut(
        id=pr.id,
        repository_id=pr.repository_id,
        number=pr.number,
        title=pr.title,
        body=pr.body,
        status=PullRequestStatus(pr.status).value,
        author_id=pr.author_id,
        author_username=pr.author.username,
        base_branch=pr.base_branch,
        head_branch=pr.head_branch,
        is_merged=bool(pr.is_merged),
        created_at=pr.created_at,
        updated_at=pr.updated_at,
        merged_at=pr.merged_at,
        closed_at=pr.closed_at,
    )


def parse_status(raw: str) -> PullRequestStatus:
    """Map a caller-supplied status onto :class:`PullRequestStatus`, case-insensitively."""
    try:
        return PullRequestStatus(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in PullRequestStatus)
        raise ValidationError(
            f"Invalid pull request status '{raw}'; expected one of: {allowed}"
        ) from None


def default_merge_message(pr: PullRequest) -> str:
    return f"Merge pull request #{pr.number} from {pr.head_branch}"


class PullRequestService(BaseService):
    """
    Application service for pull requests.

    Responsibilities
    ----------------
    - Open pull requests numbered from the repository's ``pull_request`` counter.
    - Let any authenticated account edit title and body.
    - Gate merge on repository ownership, and close/reopen on authorship or
      ownership.
    """

    def _require_pr(
        self, uow: UnitOfWork, repo: Repository, number: int, *, for_update: bool = False
    ) -> PullRequest:
        pr = uow.pull_requests.get_by_number(repo.id, number, for_update=for_update)
        if pr is None:
            raise NotFoundError("PullRequest", f"{repo.owner.username}/{repo.name}#{number}")
        return pr

    def _log(self, message: str, actor_id: str, out: PullRequestOut) -> None:
        logger.info(
            message,
            extra={"account_id": actor_id, "repository_id": out.repository_id, "number": out.number},
        )

    # ------------------------------------------------------------------ #
    # Create
    # ------------------------------------------------------------------ #

    def create(
        self, actor_id: str, owner_username: str, name: str, dto: PullRequestCreateIn
    ) -> PullRequestOut:
        """
        Open a pull request with the next free number.

        :param actor_id: Authenticated author.
        :param owner_username: Repository owner.
        :param name: Repository name.
        :param dto: Title, branches and optional body.
        :returns: Created pull request in ``open`` state.
        :raises ValidationError: When a required field is blank or the
            branches are equal.
        :raises NotFoundError: When the repository or the author does not exist.
        :raises ConflictError: When every numbering attempt collided.
        """
        title = (dto.title or "").strip()
        base = (dto.base_branch or "").strip()
        head = (dto.head_branch or "").strip()
        if not title:
            raise ValidationError("Title is required")
        if not base or not head:
            raise ValidationError("Base and head branches are required")
        if base == head:
            raise ValidationError("Base and head branches must differ")
        body = dto.body.strip() if dto.body else None

        def build(uow: UnitOfWork, repo: Repository, number: int) -> PullRequest:
            author = uow.accounts.get(actor_id)
            if author is None:
                raise NotFoundError("Account", actor_id)
            return uow.pull_requests.add(
                PullRequest(
                    repository_id=repo.id,
                    number=number,
                    title=title,
                    body=body,
                    status=PullRequestStatus.OPEN,
                    base_branch=base,
                    head_branch=head,
                    is_merged=False,
                    author=author,
                )
            )

        out = allocate_and_insert(
            self,
            kind=SequenceKind.PULL_REQUEST,
            entity="PullRequest",
            unique_constraint="uq_pull_requests_repository_number",
            locate=lambda uow: require_repository(uow, owner_username, name),
            build=build,
            present=to_out,
        )
        self._log("Pull request created", actor_id, out)
        return out

    # ------------------------------------------------------------------ #
    # Read
    # ------------------------------------------------------------------ #

    def get(self, owner_username: str, name: str, number: int) -> PullRequestOut:
        """
        :raises NotFoundError: When the repository or the pull request does not exist.
        """
        with self.ro_uow() as uow:
            repo = require_repository(uow, owner_username, name)
            return to_out(self._require_pr(uow, repo, number))

    def list(
        self, owner_username: str, name: str, *, status: str | None = None
    ) -> list[PullRequestOut]:
        """
        List pull requests, highest number first, optionally by status.

        :raises ValidationError: When ``status`` is not a known state.
        """
        wanted = parse_status(status) if status else None
        with self.ro_uow() as uow:
            repo = require_repository(uow, owner_username, name)
            rows = uow.pull_requests.list_for_repository(repo.id, status=wanted)
            return [to_out(pr) for pr in rows]

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def update(
        self,
        actor_id: str,
        owner_username: str,
        name: str,
        number: int,
        dto: PullRequestUpdateIn,
    ) -> PullRequestOut:
        """
        Edit title or body. State changes go through merge/close/reopen.

        :raises ValidationError: On a blank title.
        :raises NotFoundError: When the repository or the pull request does not exist.
        """
        fields: dict[str, object] = {}
        if dto.title is not None:
            title = dto.title.strip()
            if not title:
                raise ValidationError("Title cannot be empty")
            fields["title"] = title
        if dto.body is not None:
            fields["body"] = dto.body.strip() or None

        with self.rw_uow() as uow:
            repo = require_repository(uow, owner_username, name)
            pr = self._require_pr(uow, repo, number, for_update=True)
            if fields:
                uow.pull_requests.update(pr, **fields)
            out = to_out(pr)

        self._log("Pull request updated", actor_id, out)
        return out

    def merge(
        self,
        actor_id: str,
        owner_username: str,
        name: str,
        number: int,
        *,
        commit_message: str | None = None,
    ) -> MergeOut:
        """
        Merge an open pull request. Repository owner only.

        :param commit_message: Merge message; defaults to
            ``"Merge pull request #<n> from <head>"``.
        :raises NotFoundError: When the repository or the pull request does not exist.
        :raises ForbiddenError: When ``actor_id`` does not own the repository.
        :raises ConflictError: When the pull request is not open.
        """
        with self.rw_uow() as uow:
            repo = require_repository(uow, owner_username, name)
            pr = self._require_pr(uow, repo, number, for_update=True)
            self.ensure_allowed(
                actor_id,
                Resource.of_pull_request(pr, repo),
                Action.MERGE,
                msg="Insufficient permissions to merge",
            )
            if pr.status != PullRequestStatus.OPEN:
                raise ConflictError("PullRequest", f"#{pr.number} is {pr.status.value}, not open")

            message = (commit_message or "").strip() or default_merge_message(pr)
            uow.pull_requests.update(
                pr, status=PullRequestStatus.MERGED, is_merged=True, merged_at=utcnow()
            )
            out = to_out(pr)

        self._log("Pull request merged", actor_id, out)
        return MergeOut(pull_request=out, message=message)

    def close(self, actor_id: str, owner_username: str, name: str, number: int) -> PullRequestOut:
        """
        Close an open pull request. Author or repository owner.

        :raises ForbiddenError: When ``actor_id`` is neither author nor owner.
        :raises ConflictError: When the pull request is merged or already closed.
        """
        with self.rw_uow() as uow:
            repo = require_repository(uow, owner_username, name)
            pr = self._require_pr(uow, repo, number, for_update=True)
            self.ensure_allowed(
                actor_id,
                Resource.of_pull_request(pr, repo),
                Action.CLOSE,
                msg="Insufficient permissions to close",
            )
            if pr.status != PullRequestStatus.OPEN:
                raise ConflictError("PullRequest", f"#{pr.number} is {pr.status.value}, not open")
            uow.pull_requests.update(pr, status=PullRequestStatus.CLOSED, closed_at=utcnow())
            out = to_out(pr)

        self._log("Pull request closed", actor_id, out)
        return out

    def reopen(self, actor_id: str, owner_username: str, name: str, number: int) -> PullRequestOut:
        """
        Reopen a closed pull request. Author or repository owner.

        :raises ForbiddenError: When ``actor_id`` is neither author nor owner.
        :raises ConflictError: When the pull request is merged or already open.
        """
        with self.rw_uow() as uow:
            repo = require_repository(uow, owner_username, name)
            pr = self._require_pr(uow, repo, number, for_update=True)
            self.ensure_allowed(
                actor_id,
                Resource.of_pull_request(pr, repo),
                Action.REOPEN,
                msg="Insufficient permissions to reopen",
            )
            if pr.status != PullRequestStatus.CLOSED:
                raise ConflictError(
                    "PullRequest", f"#{pr.number} is {pr.status.value}, not closed"
                )
            uow.pull_requests.update(pr, status=PullRequestStatus.OPEN, closed_at=None)
            out = to_out(pr)

        self._log("Pull request reopened", actor_id, out)
        return out
