"""Pull-request model numbered per repository."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devit.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .account import Account
    from .repository import Repository


class PullRequestStatus(str, Enum):
    """Closed set of pull-request states."""

    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"


class PullRequest(PKMixin, TimestampMixin, ReprMixin, db.Model):
    """
    Request to merge ``head_branch`` into ``base_branch``.

    Notes
    -----
    - ``number`` follows the repository's own pull-request sequence.
    - ``merged`` is terminal: a merged pull request is neither closed nor
      reopened afterwards.
    """

    __tablename__ = "pull_requests"
    __repr_attrs__ = ("repository_id", "number", "status")

    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str | None] = mapped_column(Text)
    status: Mapped[PullRequestStatus] = mapped_column(
        SAEnum(
            PullRequestStatus,
            name="pull_request_status",
            native_enum=False,
            create_constraint=True,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=PullRequestStatus.OPEN,
    )
    author_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    base_branch: Mapped[str] = mapped_column(String(255), nullable=False)
    head_branch: Mapped[str] = mapped_column(String(255), nullable=False)
    is_merged: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    merged_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("repository_id", "number", name="uq_pull_requests_repository_number"),
        Index("ix_pull_requests_repository_id", "repository_id"),
    )

    repository: Mapped[Repository] = relationship("Repository", back_populates="pull_requests")
    author: Mapped[Account] = relationship("Account", lazy="joined")
