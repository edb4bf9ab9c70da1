"""Process-wide extension singletons: database, migrations, JWT and the token codec."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

from devit.core.config import DEFAULT_JWT_SECRET

if TYPE_CHECKING:
    from devit.infra.jwt.flask_jwt_token_codec import JWTTokenCodec

# Constraint names are stable across dialects; services match on them
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Unbound until init_app()
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()

TOKEN_CODEC_KEY = "token_codec"


def _ensure_signing_secret(app: Flask) -> None:
    """Refuse to boot a non-development app with the placeholder JWT secret.

    :param app: Application being configured.
    :raises RuntimeError: When ``JWT_SECRET_KEY`` is missing or left at its default.
    """
    secret = app.config.get("JWT_SECRET_KEY")
    if app.config.get("TESTING") or app.config.get("DEBUG"):
        return
    if not secret or secret == DEFAULT_JWT_SECRET:
        raise RuntimeError("JWT_SECRET_KEY must be set to a non-default value.")


def init_app(app: Flask) -> None:
    """Bind the extensions to ``app`` and register its single :class:`JWTTokenCodec`.

    :param app: Application being built.
    :raises RuntimeError: If the signing secret is the placeholder outside dev/testing.
    """
    db.init_app(app)

    # Alembic autogenerate needs every table on the metadata
    from devit import models as _models  # noqa: F401

    migrate.init_app(app, db)

    _ensure_signing_secret(app)
    app.config.setdefault("JWT_ALGORITHM", "HS256")
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(hours=int(app.config.get("TOKEN_TTL_HOURS", 24)))
    jwt.init_app(app)

    from devit.infra.jwt.flask_jwt_token_codec import JWTTokenCodec

    # Shared read-only by all requests; the secret cannot change after this point
    app.extensions[TOKEN_CODEC_KEY] = JWTTokenCodec(ttl=app.config["JWT_ACCESS_TOKEN_EXPIRES"])


def get_token_codec() -> JWTTokenCodec:
    """Return the codec registered on the current application."""
    codec = current_app.extensions.get(TOKEN_CODEC_KEY)
    if codec is None:
        raise RuntimeError("Token codec is not initialized. Call init_app() first.")
    return codec
