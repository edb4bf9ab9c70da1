"""Issue model numbered per repository."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devit.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .account import Account
    from .repository import Repository


class IssueStatus(str, Enum):
    """Closed set of issue states."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class Issue(PKMixin, TimestampMixin, ReprMixin, db.Model):
    """
    Issue filed against a repository.

    Fields
    ------
    number : int
        Position in the repository's issue sequence, starting at 1. Unique per
        repository and independent from pull-request numbers.
    status : IssueStatus
        ``OPEN`` on creation. Closing stamps ``closed_at``.
    """

    __tablename__ = "issues"
    __repr_attrs__ = ("repository_id", "number")

    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str | None] = mapped_column(Text)
    status: Mapped[IssueStatus] = mapped_column(
        SAEnum(
            IssueStatus,
            name="issue_status",
            native_enum=False,
            create_constraint=True,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=IssueStatus.OPEN,
    )
    author_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    assignee_id: Mapped[str | None] = mapped_column(
        ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("repository_id", "number", name="uq_issues_repository_number"),
        Index("ix_issues_repository_id", "repository_id"),
    )

    repository: Mapped[Repository] = relationship("Repository", back_populates="issues")
    author: Mapped[Account] = relationship("Account", foreign_keys=[author_id], lazy="joined")
    assignee: Mapped[Account | None] = relationship(
        "Account", foreign_keys=[assignee_id], lazy="joined"
    )
