"""Shared Marshmallow base classes."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema


class BaseSchema(Schema):
    """Ordered output; unknown input keys are dropped instead of rejected."""

    class Meta:
        ordered = True
        unknown = EXCLUDE
