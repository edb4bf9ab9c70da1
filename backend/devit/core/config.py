"""devit settings, one class per environment, selected through ``APP_ENV``.

Every value can be overridden from the environment (or a ``.env`` file in
development). The classes are read once by :func:`devit.factory.create_app`;
nothing reads ``os.environ`` after startup.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"  # development | testing | production

# Refused at startup outside development/testing
DEFAULT_JWT_SECRET: Final[str] = "CHANGE_ME_JWT"

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """``True`` for 1/true/yes/y/on (any case), ``default`` when unset."""
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    """Integer value of ``name``; ``default`` when unset or blank.

    :raises ValueError: If the variable is set to something non-numeric.
    """
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


class BaseConfig:
    """Settings shared by every environment.

    Attributes
    ----------
    JWT_SECRET_KEY: str
        The one HS256 secret session tokens are signed with. It is handed to
        the token codec at startup and never changes afterwards.
    TOKEN_TTL_HOURS: int
        Token lifetime; ``exp = iat + TOKEN_TTL_HOURS``.
    DB_STATEMENT_TIMEOUT_MS: int
        ``SET LOCAL statement_timeout`` for read-write transactions on
        PostgreSQL; ``0`` leaves the server default.
    SEQUENCE_MAX_RETRIES: int
        How many times issue/pull-request creation may collide on a number
        before the conflict is reported.
    CORS_ORIGINS: str
        Comma separated origins allowed to call the API; blank or ``*`` for any.
    """

    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    # Security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", DEFAULT_JWT_SECRET)
    JWT_ALGORITHM = "HS256"
    TOKEN_TTL_HOURS = env_int("TOKEN_TTL_HOURS", 24)

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./devit.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    DB_STATEMENT_TIMEOUT_MS = env_int("DB_STATEMENT_TIMEOUT_MS", 5000)
    SEQUENCE_MAX_RETRIES = env_int("SEQUENCE_MAX_RETRIES", 3)

    # HTTP
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_MAX_AGE = env_int("CORS_MAX_AGE", 600)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    APP_ENV = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """In-memory SQLite (or ``TEST_DATABASE_URL``) and a fixed signing secret."""

    APP_ENV = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_SECRET_KEY = "testing-secret-key-with-enough-bytes-for-hs256"
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    APP_ENV = "production"
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Config class named by ``APP_ENV``; :class:`DevelopmentConfig` when unset or unknown."""
    return CONFIG_MAP.get(os.getenv(ENV_VAR, "development").strip().lower(), DevelopmentConfig)
