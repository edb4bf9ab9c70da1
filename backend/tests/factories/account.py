"""Factory Boy definition for :class:`devit.models.account.Account`."""

from __future__ import annotations

import factory

from devit.models.account import Account, new_account_id
from tests.factories import DEFAULT_PASSWORD, BaseFactory


class AccountFactory(BaseFactory):
    """
    Build persisted :class:`Account` instances.

    Every account's password is ``password123`` unless ``password=`` is given.
    """

    class Meta:
        model = Account

    id = factory.LazyFunction(new_account_id)
    username = factory.Sequence(lambda n: f"dev{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    full_name = factory.Faker("name")
    password_hash = factory.LazyFunction(lambda: "")  # set via postgen

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Set password using model setter (ensures hashing)."""
        obj.password = extracted or DEFAULT_PASSWORD
