"""
devit.services._shared.ports
============================

*Ports* (hexagonal interfaces) the service layer depends on.

Modules
-------
- :mod:`token_codec`:
    Defines :class:`~.TokenCodec` (sign/verify stateless session tokens) and
    the :class:`~.TokenSubject` / :class:`~.TokenClaims` value objects.

Concrete adapters live under ``devit.infra``.
"""

from __future__ import annotations

from .token_codec import TokenClaims, TokenCodec, TokenSubject

__all__ = ["TokenClaims", "TokenCodec", "TokenSubject"]
