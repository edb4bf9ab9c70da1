"""
IssueService
============

Issues are numbered per repository from 1 upwards. Numbers come from the
repository's ``issue`` counter (see
:mod:`devit.repositories.sequence`), never from ``MAX(number) + 1``, so
concurrent creators always receive distinct numbers.
"""

from __future__ import annotations

import logging

from devit.models.base import utcnow
from devit.models.issue import Issue, IssueStatus
from devit.models.repository import Repository, SequenceKind
from devit.services._shared.base import BaseService
from devit.services._shared.errors import NotFoundError, ValidationError
from devit.services._shared.sequencing import allocate_and_insert
from devit.services.issues.dto import IssueCreateIn, IssueOut, IssueUpdateIn
from devit.services.repositories.service import require_repository
from devit.uow.base import UnitOfWork

logger = logging.getLogger(__name__)


def to_out(issue: Issue) -> IssueOut:
    return IssueOut(
        id=issue.id,
        repository_id=issue.repository_id,
        number=issue.number,
        title=issue.title,
        body=issue.body,
        status=IssueStatus(issue.status).value,
        author_id=issue.author_id,
        author_username=issue.author.username,
        assignee_id=issue.assignee_id,
        assignee_username=(issue.assignee.username if issue.assignee else None),
        created_at=issue.created_at,
        updated_at=issue.updated_at,
        closed_at=issue.closed_at,
    )


def parse_status(raw: str) -> IssueStatus:
    """Map a caller-supplied status onto :class:`IssueStatus`, case-insensitively."""
    try:
        return IssueStatus(raw.strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in IssueStatus)
        raise ValidationError(f"Invalid issue status '{raw}'; expected one of: {allowed}") from None


class IssueService(BaseService):
    """
    Application service for repository issues.

    Any authenticated account may open, edit and assign issues; only
    repository-level mutations are owner-gated.
    """

    def _require_issue(
        self, uow: UnitOfWork, repo: Repository, number: int, *, for_update: bool = False
    ) -> Issue:
        issue = uow.issues.get_by_number(repo.id, number, for_update=for_update)
        if issue is None:
            raise NotFoundError("Issue", f"{repo.owner.username}/{repo.name}#{number}")
        return issue

    # ------------------------------------------------------------------ #
    # Create
    # ------------------------------------------------------------------ #

    def create(self, actor_id: str, owner_username: str, name: str, dto: IssueCreateIn) -> IssueOut:
        """
        Open an issue on ``owner_username/name`` with the next free number.

        :param actor_id: Authenticated author.
        :type actor_id: str
        :param owner_username: Repository owner.
        :type owner_username: str
        :param name: Repository name.
        :type name: str
        :param dto: Title and optional body.
        :type dto: :class:`IssueCreateIn`
        :returns: Created issue.
        :rtype: :class:`IssueOut`
        :raises ValidationError: When the title is blank.
        :raises NotFoundError: When the repository or the author does not exist.
        :raises ConflictError: When every numbering attempt collided.
        """
        title = (dto.title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        body = dto.body.strip() if dto.body else None

        def build(uow: UnitOfWork, repo: Repository, number: int) -> Issue:
            author = uow.accounts.get(actor_id)
            if author is None:
                raise NotFoundError("Account", actor_id)
            return uow.issues.add(
                Issue(
                    repository_id=repo.id,
                    number=number,
                    title=title,
                    body=body,
                    status=IssueStatus.OPEN,
                    author=author,
                )
            )

        out = allocate_and_insert(
            self,
            kind=SequenceKind.ISSUE,
            entity="Issue",
            unique_constraint="uq_issues_repository_number",
            locate=lambda uow: require_repository(uow, owner_username, name),
            build=build,
            present=to_out,
        )
        logger.info(
            "Issue created",
            extra={"account_id": actor_id, "repository_id": out.repository_id, "number": out.number},
        )
        return out

    # ------------------------------------------------------------------ #
    # Read
    # ------------------------------------------------------------------ #

    def get(self, owner_username: str, name: str, number: int) -> IssueOut:
        """
        :raises NotFoundError: When the repository or the issue does not exist.
        """
        with self.ro_uow() as uow:
            repo = require_repository(uow, owner_username, name)
            return to_out(self._require_issue(uow, repo, number))

    def list(self, owner_username: str, name: str, *, status: str | None = None) -> list[IssueOut]:
        """
        List a repository's issues, highest number first.

        :param status: Optional ``OPEN`` / ``CLOSED`` filter.
        :raises ValidationError: When ``status`` is not a known state.
        """
        wanted = parse_status(status) if status else None
        with self.ro_uow() as uow:
            repo = require_repository(uow, owner_username, name)
            return [to_out(i) for i in uow.issues.list_for_repository(repo.id, status=wanted)]

    # ------------------------------------------------------------------ #
    # Update
    # ------------------------------------------------------------------ #

    def update(
        self, actor_id: str, owner_username: str, name: str, number: int, dto: IssueUpdateIn
    ) -> IssueOut:
        """
        Edit title, body or status.

        Closing stamps ``closed_at``; reopening clears it. Setting the current
        status again leaves ``closed_at`` untouched.

        :raises ValidationError: On a blank title or an unknown status.
        :raises NotFoundError: When the repository or the issue does not exist.
        """
        fields: dict[str, object] = {}
        if dto.title is not None:
            title = dto.title.strip()
            if not title:
                raise ValidationError("Title cannot be empty")
            fields["title"] = title
        if dto.body is not None:
            fields["body"] = dto.body.strip() or None
        new_status = parse_status(dto.status) if dto.status is not None else None

        with self.rw_uow() as uow:
            repo = require_repository(uow, owner_username, name)
            issue = self._require_issue(uow, repo, number, for_update=True)

            if new_status is not None and new_status != issue.status:
                fields["status"] = new_status
                fields["closed_at"] = utcnow() if new_status is IssueStatus.CLOSED else None

            if fields:
                uow.issues.update(issue, **fields)
            out = to_out(issue)

        logger.info(
            "Issue updated",
            extra={"account_id": actor_id, "repository_id": out.repository_id, "number": out.number},
        )
        return out

    def assign(
        self,
        actor_id: str,
        owner_username: str,
        name: str,
        number: int,
        assignee_username: str | None,
    ) -> IssueOut:
        """
        Assign the issue to ``assignee_username``, or unassign it with ``None``.

        :raises NotFoundError: When the repository, the issue or the assignee
            does not exist.
        """
        with self.rw_uow() as uow:
            repo = require_repository(uow, owner_username, name)
            issue = self._require_issue(uow, repo, number, for_update=True)

            assignee = None
            if assignee_username:
                assignee = uow.accounts.get_by_username(assignee_username)
                if assignee is None:
                    raise NotFoundError("Account", assignee_username)

            # Set the relationship so the projection below sees the new assignee
            issue.assignee = assignee
            uow.issues.flush()
            out = to_out(issue)

        logger.info(
            "Issue assigned",
            extra={"account_id": actor_id, "repository_id": out.repository_id, "number": out.number},
        )
        return out
