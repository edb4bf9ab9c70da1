from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class TokenSubject:
    """
    Identity facts embedded in a new token.

    :ivar account_id: Becomes the ``sub`` claim.
    :ivar username: Copied into the ``username`` claim.
    :ivar email: Copied into the ``email`` claim.
    """

    account_id: str
    username: str
    email: str


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified claims of a decoded token.

    Only ever produced for a token whose signature and expiry both checked out.
    """

    sub: str
    username: str
    email: str
    issued_at: datetime
    expires_at: datetime


class TokenCodec(Protocol):
    """Port for signing and verifying stateless session tokens."""

    def issue(self, subject: TokenSubject) -> str:
        """Sign a token for ``subject`` valid for the configured lifetime."""

    def decode(self, token: str) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        :raises InvalidCredentialsError: For expired, tampered or malformed tokens.
        """
