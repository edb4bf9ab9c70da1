"""
IdentityService
===============

Aggregate service responsible for the `Account` aggregate:
- Registration and credential verification
- Session token issuance, validation and refresh
- Public profile reads, account listing and search
- Self-service profile edits

Tokens are stateless. Nothing is stored per session, so every validation
re-reads the account: a deleted account stops authenticating immediately even
while its tokens are unexpired.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict

from sqlalchemy.exc import IntegrityError

from devit.core.extensions import get_token_codec
from devit.models.account import Account
from devit.services._shared.base import BaseService
from devit.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
    violates,
)
from devit.services._shared.policies.authorization import Action, Resource
from devit.services._shared.ports import TokenCodec, TokenSubject
from devit.services.identity.dto import (
    AccountPublicOut,
    Identity,
    LoginIn,
    ProfileUpdateIn,
    RegisterIn,
    TokenOut,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
USERNAME_RE = re.compile(r"^[a-zA-Z0-9_-]{3,32}$")
DUPLICATE_ACCOUNT = "username or email already exists"

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 50


def to_public(account: Account) -> AccountPublicOut:
    """Project an account onto its digest-free public view."""
    return AccountPublicOut(
        id=account.id,
        username=account.username,
        email=account.email,
        full_name=account.full_name,
        bio=account.bio,
        avatar_url=account.avatar_url,
        website_url=account.website_url,
        location=account.location,
        company=account.company,
        is_admin=bool(account.is_admin),
        is_verified=bool(account.is_verified),
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


def _page_size(limit: int | None, default: int, ceiling: int) -> int:
    if limit is None:
        return default
    if limit < 1:
        raise ValidationError("limit must be at least 1")
    return min(limit, ceiling)


class IdentityService(BaseService):
    """
    Application service for the `Account` aggregate.

    Responsibilities
    ----------------
    - Register accounts ensuring username and email uniqueness.
    - Authenticate credentials without revealing which part was wrong.
    - Issue, validate and refresh session tokens via the :class:`TokenCodec`.
    - Serve public profiles and self-only profile updates.
    """

    def __init__(self, *, codec: TokenCodec | None = None) -> None:
        """
        :param codec: Token codec; defaults to the one registered on the app.
        """
        super().__init__()
        self._codec = codec

    @property
    def codec(self) -> TokenCodec:
        if self._codec is None:
            self._codec = get_token_codec()
        return self._codec

    def _issue(self, public: AccountPublicOut) -> TokenOut:
        token = self.codec.issue(
            TokenSubject(account_id=public.id, username=public.username, email=public.email)
        )
        return TokenOut(token=token, account=public)

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: RegisterIn) -> TokenOut:
        """
        Register a new account and sign it in.

        Validation runs in this order: required fields, password length, email
        shape, username shape.

        :param dto: Registration input DTO.
        :type dto: RegisterIn
        :returns: Token for the new account plus its public view.
        :rtype: TokenOut
        :raises ValidationError: When the input is incomplete or malformed.
        :raises ConflictError: When the username or email is already taken,
            including when a concurrent registration wins the race.
        """
        username = (dto.username or "").strip()
        email = (dto.email or "").strip().lower()
        password = dto.password or ""

        if not username or not email or not password:
            raise ValidationError("Username, email, and password are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if "@" not in email:
            raise ValidationError("Invalid email format")
        if not USERNAME_RE.fullmatch(username):
            raise ValidationError(
                "Username must be 3-32 characters of letters, digits, '_' or '-'"
            )

        # Hash outside the transaction so row locks are not held during it.
        account = Account(
            username=username,
            email=email,
            password=password,
            full_name=(dto.full_name or None),
        )

        with self.rw_uow() as uow:
            repo = uow.accounts
            if repo.exists_by_username_or_email(username, email):
                raise ConflictError("Account", DUPLICATE_ACCOUNT)
            try:
                repo.add(account)
            except IntegrityError as exc:
                # The unique constraints settle a race the pre-check lost.
                if violates(exc, "uq_accounts_username") or violates(exc, "uq_accounts_email"):
                    raise ConflictError("Account", DUPLICATE_ACCOUNT) from exc
                raise
            public = to_public(account)

        logger.info("Account registered", extra={"account_id": public.id})
        return self._issue(public)

    # --------------------------------------------------------------------- #
    # Authentication
    # --------------------------------------------------------------------- #

    def authenticate(self, dto: LoginIn) -> TokenOut:
        """
        Verify credentials, refresh ``updated_at`` and issue a token.

        Lookup and timestamp update share one transaction with the account
        row locked, so concurrent logins never observe a half-updated row.

        :param dto: Authentication input DTO.
        :type dto: LoginIn
        :returns: Fresh token plus the public account view.
        :rtype: TokenOut
        :raises ValidationError: When either field is empty.
        :raises InvalidCredentialsError: For an unknown account or a wrong
            password (same message for both).
        """
        handle = (dto.username_or_email or "").strip()
        if not handle or not dto.password:
            raise ValidationError("Username or email and password are required")

        with self.rw_uow() as uow:
            repo = uow.accounts
            account = repo.find_by_username_or_email(handle, for_update=True)
            if account is None or not account.verify_password(dto.password):
                raise InvalidCredentialsError()
            repo.touch(account)
            public = to_public(account)

        logger.info("Account authenticated", extra={"account_id": public.id})
        return self._issue(public)

    # --------------------------------------------------------------------- #
    # Tokens
    # --------------------------------------------------------------------- #

    def validate_token(self, token: str) -> Identity:
        """
        Resolve a bearer token to the identity of a still-existing account.

        :param token: Encoded session token.
        :type token: str
        :returns: Identity built from the stored account, not from the claims.
        :rtype: Identity
        :raises InvalidCredentialsError: When the token is expired or invalid.
        :raises NotFoundError: When the account no longer exists.
        """
        claims = self.codec.decode(token)
        with self.ro_uow() as uow:
            account = uow.accounts.get(claims.sub)
            if account is None:
                raise NotFoundError("Account", claims.sub)
            return Identity(
                id=account.id,
                username=account.username,
                email=account.email,
                is_admin=bool(account.is_admin),
                is_verified=bool(account.is_verified),
            )

    def refresh_token(self, account_id: str) -> TokenOut:
        """
        Issue a new token with a fresh lifetime for an existing account.

        :param account_id: Account to sign in again.
        :type account_id: str
        :returns: New token plus the public account view.
        :rtype: TokenOut
        :raises NotFoundError: When the account no longer exists.
        """
        with self.ro_uow() as uow:
            account = uow.accounts.get(account_id)
            if account is None:
                raise NotFoundError("Account", account_id)
            public = to_public(account)
        return self._issue(public)

    # --------------------------------------------------------------------- #
    # Profiles
    # --------------------------------------------------------------------- #

    def get_account(self, account_id: str) -> AccountPublicOut:
        """
        Retrieve an account by identifier.

        :raises NotFoundError: If the account does not exist.
        """
        with self.ro_uow() as uow:
            account = uow.accounts.get(account_id)
            if account is None:
                raise NotFoundError("Account", account_id)
            return to_public(account)

    def get_account_by_username(self, username: str) -> AccountPublicOut:
        """
        Retrieve an account by username.

        :raises NotFoundError: If no account has that username.
        """
        with self.ro_uow() as uow:
            account = uow.accounts.get_by_username(username)
            if account is None:
                raise NotFoundError("Account", username)
            return to_public(account)

    def list_accounts(self, limit: int | None = None, offset: int | None = None) -> list[AccountPublicOut]:
        """
        Page through accounts, newest first.

        :param limit: Page size; defaults to 50 and is capped at 100.
        :param offset: Rows to skip; defaults to 0.
        :raises ValidationError: When ``limit`` is below 1 or ``offset`` is negative.
        """
        size = _page_size(limit, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
        skip = 0 if offset is None else offset
        if skip < 0:
            raise ValidationError("offset must not be negative")
        with self.ro_uow() as uow:
            return [to_public(a) for a in uow.accounts.list_page(limit=size, offset=skip)]

    def search_accounts(self, query: str, limit: int | None = None) -> list[AccountPublicOut]:
        """
        Find accounts whose username, full name or email contains ``query``.

        Username matches come first, then full-name matches, then email
        matches; newer accounts first within each group.

        :param query: Case-insensitive substring.
        :param limit: Result cap; defaults to 20 and is capped at 50.
        :raises ValidationError: When ``query`` is blank or ``limit`` is below 1.
        """
        needle = (query or "").strip()
        if not needle:
            raise ValidationError("Search query must not be empty")
        size = _page_size(limit, DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT)
        with self.ro_uow() as uow:
            return [to_public(a) for a in uow.accounts.search(needle, limit=size)]

    def update_profile(self, actor_id: str, username: str, dto: ProfileUpdateIn) -> AccountPublicOut:
        """
        Edit profile fields of ``username``; only that account may do it.

        :param actor_id: Authenticated account performing the edit.
        :param username: Account being edited.
        :param dto: Fields to change; ``None`` leaves a field as is.
        :returns: Updated public view.
        :raises NotFoundError: If the target account does not exist.
        :raises ForbiddenError: If ``actor_id`` is not the target account.
        """
        with self.rw_uow() as uow:
            repo = uow.accounts
            account = repo.get_by_username(username)
            if account is None:
                raise NotFoundError("Account", username)
            self.ensure_allowed(
                actor_id,
                Resource.of_account(account),
                Action.UPDATE,
                msg="You can only update your own profile",
            )
            updates = {k: v for k, v in asdict(dto).items() if v is not None}
            if updates:
                repo.update(account, **updates)
            public = to_public(account)

        logger.info("Profile updated", extra={"account_id": public.id})
        return public
