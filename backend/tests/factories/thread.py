"""Factories for numbered repository threads: issues and pull requests.

Numbers are given explicitly by the tests; the factories never touch the
repository's counters.
"""

from __future__ import annotations

import factory

from devit.models.issue import Issue, IssueStatus
from devit.models.pull_request import PullRequest, PullRequestStatus
from tests.factories import BaseFactory
from tests.factories.account import AccountFactory
from tests.factories.repository import RepositoryFactory


class IssueFactory(BaseFactory):
    class Meta:
        model = Issue

    repository = factory.SubFactory(RepositoryFactory)
    author = factory.SubFactory(AccountFactory)
    number = factory.Sequence(lambda n: n + 1)
    title = factory.Faker("sentence", nb_words=4)
    body = factory.Faker("paragraph")
    status = IssueStatus.OPEN


class PullRequestFactory(BaseFactory):
    class Meta:
        model = PullRequest

    repository = factory.SubFactory(RepositoryFactory)
    author = factory.SubFactory(AccountFactory)
    number = factory.Sequence(lambda n: n + 1)
    title = factory.Faker("sentence", nb_words=4)
    body = None
    status = PullRequestStatus.OPEN
    base_branch = "main"
    head_branch = factory.Sequence(lambda n: f"feature-{n}")
    is_merged = False
