"""Transaction scopes handed to the services."""

from .base import UnitOfWork
from .sqlalchemy_uow import ReadOnlyViolation, SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "ReadOnlyViolation",
    "SQLAlchemyReadOnlyUnitOfWork",
    "SQLAlchemyUnitOfWork",
    "UnitOfWork",
]
