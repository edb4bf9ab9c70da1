"""Code repository model and its per-kind numbering counters."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devit.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .account import Account
    from .issue import Issue
    from .pull_request import PullRequest

DEFAULT_BRANCH = "main"


class Repository(PKMixin, TimestampMixin, ReprMixin, db.Model):
    """
    Repository owned by exactly one account.

    Notes
    -----
    - ``(owner_id, name)`` is unique, which makes ``owner_username/name`` a
      stable public address.
    - ``star_count``, ``fork_count`` and ``watch_count`` start at zero.
    """

    __tablename__ = "repositories"
    __repr_attrs__ = ("owner_id", "name")

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    is_private: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_fork: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    default_branch: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_BRANCH, server_default=DEFAULT_BRANCH
    )
    language: Mapped[str | None] = mapped_column(String(50))
    star_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    fork_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    watch_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_repositories_owner_name"),
        Index("ix_repositories_owner_id", "owner_id"),
    )

    owner: Mapped[Account] = relationship("Account", back_populates="repositories", lazy="joined")
    issues: Mapped[list[Issue]] = relationship(
        "Issue", back_populates="repository", cascade="all, delete-orphan"
    )
    pull_requests: Mapped[list[PullRequest]] = relationship(
        "PullRequest", back_populates="repository", cascade="all, delete-orphan"
    )
    sequences: Mapped[list[RepositorySequence]] = relationship(
        "RepositorySequence", cascade="all, delete-orphan"
    )


class SequenceKind(str, Enum):
    """Independent numbering sequences kept per repository."""

    ISSUE = "issue"
    PULL_REQUEST = "pull_request"


class RepositorySequence(db.Model):
    """
    Last number handed out for one ``(repository, kind)`` pair.

    The row is bumped with a single ``UPDATE ... SET last_number =
    last_number + 1`` so the write lock it takes serialises concurrent
    creators until their transaction ends.
    """

    __tablename__ = "repository_sequences"

    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"), primary_key=True
    )
    kind: Mapped[str] = mapped_column(String(20), primary_key=True)
    last_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    def __repr__(self) -> str:
        return f"<RepositorySequence {self.repository_id}/{self.kind}={self.last_number}>"
