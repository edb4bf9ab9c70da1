"""Liveness and readiness probe."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from devit.api.deps import json_response, timing
from devit.core.extensions import TOKEN_CODEC_KEY, db

bp = Blueprint("health", __name__)


def _database_ok() -> bool:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("Health check: database unreachable")
        db.session.rollback()
        return False
    return True


@bp.get("/health")
@timing
def healthcheck():
    """Report database reachability and whether token signing is wired up."""

    checks = {
        "database": "ok" if _database_ok() else "fail",
        "tokens": "ok" if TOKEN_CODEC_KEY in current_app.extensions else "fail",
    }
    healthy = all(value == "ok" for value in checks.values())
    payload = {
        "status": "ok" if healthy else "degraded",
        "checks": checks,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if healthy else 503)
