"""
Concurrent issue and pull-request creation against a file-backed SQLite DB.

These tests do not use the SAVEPOINT session from ``conftest``: every worker
thread needs its own connection and real commits, so each test builds a
throwaway app (or engine) over a database file in ``tmp_path``.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from devit import models  # noqa: F401  # registers tables on the metadata
from devit.core.config import TestingConfig
from devit.core.extensions import db as _db
from devit.core.extensions import metadata
from devit.factory import create_app
from devit.models import Account, Issue, Repository, SequenceKind
from devit.repositories.sequence import SequenceRepository
from devit.services.issues.dto import IssueCreateIn
from devit.services.issues.service import IssueService
from devit.services.pull_requests.dto import PullRequestCreateIn
from devit.services.pull_requests.service import PullRequestService
from devit.uow import SQLAlchemyUnitOfWork


WORKERS = 8


@pytest.fixture(autouse=True)
def _factories_session():
    """These tests manage their own sessions."""
    yield


@pytest.fixture
def file_app(tmp_path):
    class FileConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'concurrency.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30}}

    app = create_app(FileConfig, instance_relative_config=False)
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.session.remove()
        _db.engine.dispose()


def _seed_repository(*, seed_counters: bool = True, existing_issues: int = 0) -> int:
    owner = Account(username="alice", email="alice@example.com", password="password123")
    repository = Repository(owner=owner, name="proj")
    _db.session.add(repository)
    _db.session.flush()
    if seed_counters:
        SequenceRepository(session=_db.session).seed(repository.id)
    for number in range(1, existing_issues + 1):
        _db.session.add(
            Issue(repository_id=repository.id, number=number, title=f"old {number}", author=owner)
        )
    _db.session.commit()
    return owner.id


def _run_concurrently(app, job):
    barrier = threading.Barrier(WORKERS)

    def worker(i: int) -> int:
        with app.app_context():
            barrier.wait()
            return job(i)

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        return list(pool.map(worker, range(WORKERS)))


def test_concurrent_issue_creation_gets_distinct_consecutive_numbers(file_app):
    with file_app.app_context():
        author_id = _seed_repository()

    numbers = _run_concurrently(
        file_app,
        lambda i: IssueService()
        .create(author_id, "alice", "proj", IssueCreateIn(title=f"Issue {i}"))
        .number,
    )

    assert sorted(numbers) == list(range(1, WORKERS + 1))


def test_concurrent_pull_requests_use_their_own_sequence(file_app):
    with file_app.app_context():
        author_id = _seed_repository(existing_issues=3)

    numbers = _run_concurrently(
        file_app,
        lambda i: PullRequestService()
        .create(
            author_id,
            "alice",
            "proj",
            PullRequestCreateIn(title=f"PR {i}", base_branch="main", head_branch=f"b{i}"),
        )
        .number,
    )

    assert sorted(numbers) == list(range(1, WORKERS + 1))


def test_unseeded_counter_continues_after_existing_issues(file_app):
    existing = 5
    with file_app.app_context():
        author_id = _seed_repository(seed_counters=False, existing_issues=existing)

    numbers = _run_concurrently(
        file_app,
        lambda i: IssueService()
        .create(author_id, "alice", "proj", IssueCreateIn(title=f"Issue {i}"))
        .number,
    )

    assert sorted(numbers) == list(range(existing + 1, existing + WORKERS + 1))


def test_reservations_on_separate_sessions_never_repeat(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'reserve.db'}", connect_args={"timeout": 30}
    )
    metadata.create_all(engine)
    with Session(engine) as setup:
        owner = Account(username="bob", email="bob@example.com", password="password123")
        repository = Repository(owner=owner, name="lib")
        setup.add(repository)
        setup.flush()
        SequenceRepository(session=setup).seed(repository.id)
        setup.commit()
        repository_id = repository.id

    barrier = threading.Barrier(WORKERS)

    def reserve(_: int) -> int:
        barrier.wait()
        with Session(engine) as session, SQLAlchemyUnitOfWork(session=session) as uow:
            return uow.sequences.reserve_next_number(repository_id, SequenceKind.ISSUE)

    try:
        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            numbers = list(pool.map(reserve, range(WORKERS)))
    finally:
        engine.dispose()

    assert sorted(numbers) == list(range(1, WORKERS + 1))
