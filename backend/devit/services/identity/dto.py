"""
DTOs for IdentityService.

Data Transfer Objects isolate the service layer from ORM models; none of the
output DTOs carries the password digest.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for account registration.

    :param username: Public handle.
    :type username: str
    :param email: Login email (normalized to lowercase).
    :type email: str
    :param password: Raw password to be hashed by the model.
    :type password: str
    :param full_name: Optional real name.
    :type full_name: str | None
    """

    username: str
    email: str
    password: str
    full_name: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for authentication.

    :param username_or_email: Username or email of the account.
    :type username_or_email: str
    :param password: Raw password.
    :type password: str
    """

    username_or_email: str
    password: str


@dataclass(frozen=True, slots=True)
class ProfileUpdateIn:
    """
    Input DTO for profile edits. ``None`` leaves a field unchanged.
    """

    full_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    website_url: str | None = None
    location: str | None = None
    company: str | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class AccountPublicOut:
    """
    Output DTO representing public-safe account data.
    """

    id: str
    username: str
    email: str
    full_name: str | None
    bio: str | None
    avatar_url: str | None
    website_url: str | None
    location: str | None
    company: str | None
    is_admin: bool
    is_verified: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Authenticated caller, rebuilt from the stored account on every request.

    :param id: Account identifier.
    :type id: str
    :param username: Current username.
    :type username: str
    :param email: Current email.
    :type email: str
    """

    id: str
    username: str
    email: str
    is_admin: bool = False
    is_verified: bool = False


@dataclass(frozen=True, slots=True)
class TokenOut:
    """
    Output DTO for register / login / refresh.

    :param token: Encoded session token.
    :type token: str
    :param account: Public view of the token's account.
    :type account: AccountPublicOut
    """

    token: str
    account: AccountPublicOut
