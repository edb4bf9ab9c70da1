"""HTTP API: versioned blueprint registration."""

from __future__ import annotations

from flask import Flask


def _join(*parts: str) -> str:
    path = "/".join(part.strip("/") for part in parts if part.strip("/"))
    return "/" + path


def init_app(app: Flask) -> None:
    """Mount every v1 blueprint under ``<API_BASE_PREFIX>/v1``."""

    from devit.api.v1 import API_VERSION, REGISTRY

    base = _join(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION)
    for blueprint, prefix in REGISTRY:
        app.register_blueprint(blueprint, url_prefix=_join(base, prefix))


__all__ = ["init_app"]
