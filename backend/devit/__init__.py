"""Expose the application factory at package level.

Provide convenient access to :func:`devit.factory.create_app` so callers can
``from devit import create_app`` (``gunicorn 'devit:create_app()'``).
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
