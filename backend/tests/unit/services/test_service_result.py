"""Tests for the tagged-result boundary and the error taxonomy."""

from __future__ import annotations

import logging

import pytest
from sqlalchemy.exc import IntegrityError

from devit.api.deps import unwrap
from devit.core.errors import BadRequest, Conflict, NotFound, Unauthorized
from devit.services._shared.errors import (
    ConflictError,
    ErrorKind,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
    violates,
)
from devit.services._shared.result import ServiceResult, capture


def _raise(exc):
    raise exc


class TestCapture:
    def test_success_carries_value(self):
        result = capture(lambda x, *, y: x + y, 2, y=3)

        assert result.ok
        assert result.value == 5
        assert result.kind is None

    @pytest.mark.parametrize(
        ("exc", "kind", "message"),
        [
            (ValidationError("Title is required"), ErrorKind.VALIDATION, "Title is required"),
            (InvalidCredentialsError(), ErrorKind.INVALID_CREDENTIALS, "Invalid credentials"),
            (NotFoundError("Issue", "a/b#1"), ErrorKind.NOT_FOUND, "Issue not found: a/b#1"),
            (ConflictError("Account", "taken"), ErrorKind.CONFLICT, "Conflict on Account: taken"),
        ],
    )
    def test_service_errors_become_failures(self, exc, kind, message):
        result = capture(_raise, exc)

        assert not result.ok
        assert result.kind is kind
        assert result.message == message

    def test_internal_detail_is_hidden(self, caplog):
        with caplog.at_level(logging.ERROR):
            result = capture(_raise, InternalError("db password is hunter2"))

        assert result.kind is ErrorKind.INTERNAL
        assert result.message == "Internal server error"
        assert "Service failure" in caplog.text

    def test_unexpected_exception_is_internal(self, caplog):
        with caplog.at_level(logging.ERROR):
            result = capture(_raise, RuntimeError("connection reset"))

        assert result.kind is ErrorKind.INTERNAL
        assert "connection reset" not in result.message
        assert "Unexpected failure" in caplog.text


def test_error_kinds_map_to_http_statuses():
    assert {kind: kind.http_status for kind in ErrorKind} == {
        ErrorKind.VALIDATION: 400,
        ErrorKind.INVALID_CREDENTIALS: 401,
        ErrorKind.FORBIDDEN: 403,
        ErrorKind.NOT_FOUND: 404,
        ErrorKind.CONFLICT: 409,
        ErrorKind.INTERNAL: 500,
    }


def test_failure_factory():
    result = ServiceResult.failure(ErrorKind.FORBIDDEN, "nope")

    assert not result.ok
    assert result.value is None


class TestViolates:
    def _integrity(self, message):
        return IntegrityError("INSERT ...", {}, Exception(message))

    def test_matches_postgres_constraint_name(self):
        exc = self._integrity('duplicate key value violates unique constraint "uq_accounts_email"')

        assert violates(exc, "uq_accounts_email")
        assert not violates(exc, "uq_accounts_username")

    def test_matches_sqlite_column_rendering(self):
        exc = self._integrity("UNIQUE constraint failed: issues.repository_id, issues.number")

        assert violates(exc, "uq_issues_repository_number")
        assert not violates(exc, "uq_pull_requests_repository_number")


class TestUnwrap:
    def test_success_returns_the_value(self):
        assert unwrap(ServiceResult.success([1, 2])) == [1, 2]
        assert unwrap(ServiceResult.success(None)) is None

    @pytest.mark.parametrize(
        ("kind", "error_cls", "status"),
        [
            (ErrorKind.VALIDATION, BadRequest, 400),
            (ErrorKind.INVALID_CREDENTIALS, Unauthorized, 401),
            (ErrorKind.NOT_FOUND, NotFound, 404),
            (ErrorKind.CONFLICT, Conflict, 409),
        ],
    )
    def test_failure_raises_the_matching_api_error(self, kind, error_cls, status):
        with pytest.raises(error_cls) as info:
            unwrap(ServiceResult.failure(kind, "went wrong"))

        assert info.value.status_code == status
        assert info.value.message == "went wrong"
