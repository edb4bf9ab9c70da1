# devit/infra/jwt/flask_jwt_token_codec.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import InvalidTokenError

from devit.services._shared.errors import InvalidCredentialsError
from devit.services._shared.ports import TokenClaims, TokenCodec, TokenSubject

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid or expired token"


@dataclass(frozen=True, slots=True)
class JWTTokenCodec(TokenCodec):
    """
    Adapter issuing compact HS256 JWTs through Flask-JWT-Extended.

    The signing secret is the app's ``JWT_SECRET_KEY``; one instance is built
    at startup and kept in ``app.extensions``.

    .. note::
       Requires an active Flask app context.
    """

    ttl: timedelta = timedelta(hours=24)

    def issue(self, subject: TokenSubject, *, ttl: timedelta | None = None) -> str:
        """
        Sign ``{sub, username, email, iat, exp}`` for ``subject``.

        :param subject: Identity facts to embed.
        :param ttl: Override of the configured lifetime.
        :returns: Encoded token.
        """
        return cast(
            str,
            create_access_token(
                identity=subject.account_id,
                additional_claims={"username": subject.username, "email": subject.email},
                expires_delta=self.ttl if ttl is None else ttl,
            ),
        )

    def decode(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry, then extract the claims.

        :raises InvalidCredentialsError: On any verification or shape failure.
        """
        if not token:
            raise InvalidCredentialsError(INVALID_TOKEN_MESSAGE)
        try:
            payload = cast(dict[str, Any], decode_token(token))
            return TokenClaims(
                sub=str(payload["sub"]),
                username=str(payload["username"]),
                email=str(payload["email"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=UTC),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
            )
        except (InvalidTokenError, JWTExtendedException, KeyError, TypeError, ValueError) as exc:
            logger.info("Token rejected: %s", type(exc).__name__)
            raise InvalidCredentialsError(INVALID_TOKEN_MESSAGE) from exc
