"""Version 1 of the devit HTTP API."""

from __future__ import annotations

from flask import Blueprint

from .auth import bp as auth_bp
from .health import bp as health_bp
from .issues import bp as issues_bp
from .pulls import bp as pulls_bp
from .repos import bp as repos_bp
from .users import bp as users_bp

API_VERSION = "v1"

# (blueprint, prefix below /api/v1); threads hang off /repos/<owner>/<name>
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (auth_bp, "/auth"),
    (users_bp, "/users"),
    (repos_bp, "/repos"),
    (issues_bp, "/repos"),
    (pulls_bp, "/repos"),
]
