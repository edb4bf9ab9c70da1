"""Factory Boy definition for :class:`devit.models.repository.Repository`."""

from __future__ import annotations

import factory

from devit.models.repository import Repository
from devit.repositories.sequence import SequenceRepository
from tests.factories import BaseFactory, SQLAlchemySession
from tests.factories.account import AccountFactory


class RepositoryFactory(BaseFactory):
    """
    Build persisted repositories with zeroed numbering counters.

    Pass ``seed_counters=False`` to leave the counters missing, as for rows
    created before counters existed.
    """

    class Meta:
        model = Repository

    owner = factory.SubFactory(AccountFactory)
    name = factory.Sequence(lambda n: f"repo-{n}")
    description = factory.Faker("sentence")
    is_private = False
    default_branch = "main"

    @factory.post_generation
    def seed_counters(obj, create, extracted, **kwargs):
        if not create or extracted is False:
            return
        SequenceRepository(session=SQLAlchemySession.get()).seed(obj.id)
