"""Cross-origin policy for the JSON API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from devit.core.logger import REQUEST_ID_HEADER


def allowed_origins(raw: str | None) -> str | list[str]:
    """Parse ``CORS_ORIGINS`` (comma separated); blank or ``*`` means any origin."""

    origins = [item.strip().rstrip("/") for item in (raw or "").split(",") if item.strip()]
    if not origins or "*" in origins:
        return "*"
    return origins


def init_app(app: Flask) -> None:
    # Bearer tokens only, so the browser never has to send cookies
    CORS(
        app,
        resources={f"{app.config.get('API_BASE_PREFIX', '/api')}/*": {
            "origins": allowed_origins(app.config.get("CORS_ORIGINS")),
        }},
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        supports_credentials=False,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
