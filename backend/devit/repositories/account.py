"""Account repository: the credential store."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import case, or_, select

from devit.models.account import Account
from devit.models.base import utcnow
from devit.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Persistence-only repository for :class:`Account`.

    Lookups by id, username and email, plus the profile whitelist. It NEVER
    issues tokens or verifies passwords on behalf of a caller; that belongs to
    the identity service.
    """

    model = Account

    def _sortable_fields(self):
        return {
            "username": Account.username,
            "created_at": Account.created_at,
        }

    def _filterable_fields(self):
        return {
            "username": Account.username,
            "email": Account.email,
        }

    def _updatable_fields(self):
        """Profile fields an account may edit on itself."""
        return {"full_name", "bio", "avatar_url", "website_url", "location", "company"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_username(self, username: str) -> Account | None:
        """Fetch an account by exact username."""
        stmt = select(Account).where(Account.username == username.strip())
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: Account instance or ``None`` when not found.
        :rtype: Account | None
        """
        stmt = select(Account).where(Account.email == email.lower().strip())
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def find_by_username_or_email(self, value: str, *, for_update: bool = False) -> Account | None:
        """Fetch the account whose username or email equals ``value``.

        :param value: Login handle supplied by the caller.
        :type value: str
        :param for_update: Lock the row until the enclosing transaction ends.
        :type for_update: bool
        :returns: Matching account or ``None``.
        :rtype: Account | None
        """
        handle = value.strip()
        stmt = select(Account).where(
            or_(Account.username == handle, Account.email == handle.lower())
        )
        if for_update:
            stmt = stmt.with_for_update()
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def exists_by_username_or_email(self, username: str, email: str) -> bool:
        """Return ``True`` when either the username or the email is taken."""
        stmt = select(Account.id).where(
            or_(Account.username == username.strip(), Account.email == email.lower().strip())
        )
        return self.session.execute(stmt.limit(1)).first() is not None

    def list_page(self, *, limit: int, offset: int = 0) -> list[Account]:
        """Newest accounts first."""
        return self.list(sort=["-created_at"], limit=limit, offset=offset)

    def search(self, query: str, *, limit: int) -> list[Account]:
        """Accounts whose username, full name or email contains ``query``.

        Matching is case-insensitive and treats ``%``/``_`` literally.
        Username hits rank before full-name hits, which rank before email
        hits; ties go to the newest account.

        :param query: Substring to look for; already stripped by the caller.
        :param limit: Maximum number of rows.
        :returns: Ranked matches.
        """
        in_username = Account.username.icontains(query, autoescape=True)
        in_full_name = Account.full_name.icontains(query, autoescape=True)
        in_email = Account.email.icontains(query, autoescape=True)
        rank = case((in_username, 1), (in_full_name, 2), else_=3)
        stmt = (
            select(Account)
            .where(or_(in_username, in_full_name, in_email))
            .order_by(rank, Account.created_at.desc(), Account.id.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())

    # ---------------------------- Writes ----------------------------

    def touch(self, account: Account, *, at: datetime | None = None) -> Account:
        """Refresh ``updated_at`` and flush.

        :param account: Account whose timestamp is bumped.
        :param at: Explicit timestamp; defaults to now (UTC).
        :returns: The same account.
        """
        account.updated_at = at or utcnow()
        self.flush()
        return account
