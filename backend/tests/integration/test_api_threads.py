"""Integration tests for issue and pull-request endpoints."""

from __future__ import annotations

import pytest

from tests.helpers.http import API, assert_problem, json_headers, register


@pytest.fixture()
def tokens(client):
    """alice owns ``alice/proj``; bob and mallory are other accounts."""
    alice = register(client, "alice")
    client.post(f"{API}/repos", json={"name": "proj"}, headers=json_headers(alice))
    return {"alice": alice, "bob": register(client, "bob"), "mallory": register(client, "mallory")}


ISSUES = f"{API}/repos/alice/proj/issues"
PULLS = f"{API}/repos/alice/proj/pulls"


class TestIssues:
    def test_issue_flow(self, client, tokens):
        bob = json_headers(tokens["bob"])

        first = client.post(ISSUES, json={"title": "Crash on start"}, headers=bob)
        second = client.post(ISSUES, json={"title": "Typo", "body": "README"}, headers=bob)

        assert first.status_code == 201
        assert first.get_json()["data"]["number"] == 1
        assert first.get_json()["data"]["status"] == "OPEN"
        assert first.get_json()["data"]["author"] == "bob"
        assert second.get_json()["data"]["number"] == 2

        closed = client.patch(f"{ISSUES}/1", json={"status": "CLOSED"}, headers=bob)
        assert closed.get_json()["data"]["status"] == "CLOSED"
        assert closed.get_json()["data"]["closed_at"] is not None

        listing = client.get(ISSUES, query_string={"status": "OPEN"})
        assert [i["number"] for i in listing.get_json()["data"]] == [2]

        single = client.get(f"{ISSUES}/2")
        assert single.get_json()["data"]["body"] == "README"

    def test_assign_and_unassign(self, client, tokens):
        bob = json_headers(tokens["bob"])
        client.post(ISSUES, json={"title": "Bug"}, headers=bob)

        assigned = client.post(f"{ISSUES}/1/assignees", json={"assignee": "alice"}, headers=bob)
        cleared = client.post(f"{ISSUES}/1/assignees", json={"assignee": None}, headers=bob)

        assert assigned.get_json()["data"]["assignee"] == "alice"
        assert cleared.get_json()["data"]["assignee"] is None
        assert_problem(
            client.post(f"{ISSUES}/1/assignees", json={"assignee": "ghost"}, headers=bob), 404
        )

    def test_errors(self, client, tokens):
        bob = json_headers(tokens["bob"])

        assert_problem(client.post(ISSUES, json={"title": "x"}), 401)
        assert_problem(client.post(ISSUES, json={"title": " "}, headers=bob), 400)
        assert_problem(client.get(f"{ISSUES}/99"), 404)
        assert_problem(client.get(ISSUES, query_string={"status": "stale"}), 400)
        assert_problem(
            client.post(f"{API}/repos/alice/ghost/issues", json={"title": "x"}, headers=bob), 404
        )


class TestPullRequests:
    def _open(self, client, token, head="fix"):
        return client.post(
            PULLS,
            json={"title": "Fix", "base_branch": "main", "head_branch": head},
            headers=json_headers(token),
        )

    def test_numbers_are_independent_from_issues(self, client, tokens):
        bob = json_headers(tokens["bob"])
        client.post(ISSUES, json={"title": "Bug"}, headers=bob)

        resp = self._open(client, tokens["bob"])

        assert resp.status_code == 201
        assert resp.get_json()["data"]["number"] == 1
        assert resp.get_json()["data"]["status"] == "open"

    def test_only_owner_merges(self, client, tokens):
        self._open(client, tokens["bob"])

        assert_problem(
            client.put(f"{PULLS}/1/merge", json={}, headers=json_headers(tokens["bob"])),
            403,
            detail="Insufficient permissions to merge",
        )

        merged = client.put(f"{PULLS}/1/merge", json={}, headers=json_headers(tokens["alice"]))
        assert merged.status_code == 200
        assert merged.get_json()["data"]["status"] == "merged"
        assert merged.get_json()["data"]["is_merged"] is True
        assert merged.get_json()["meta"]["message"] == "Merge pull request #1 from fix"

        assert_problem(
            client.put(f"{PULLS}/1/merge", json={}, headers=json_headers(tokens["alice"])), 409
        )

    def test_close_and_reopen_by_author_not_stranger(self, client, tokens):
        self._open(client, tokens["bob"])

        assert_problem(
            client.patch(f"{PULLS}/1/close", headers=json_headers(tokens["mallory"])), 403
        )
        closed = client.patch(f"{PULLS}/1/close", headers=json_headers(tokens["bob"]))
        assert closed.get_json()["data"]["status"] == "closed"

        assert_problem(
            client.patch(f"{PULLS}/1/reopen", headers=json_headers(tokens["mallory"])), 403
        )
        reopened = client.patch(f"{PULLS}/1/reopen", headers=json_headers(tokens["alice"]))
        assert reopened.get_json()["data"]["status"] == "open"

    def test_same_branches_are_rejected(self, client, tokens):
        assert_problem(self._open(client, tokens["bob"], head="main"), 400)

    def test_edit_and_list(self, client, tokens):
        self._open(client, tokens["bob"], head="a")
        self._open(client, tokens["bob"], head="b")

        edited = client.patch(
            f"{PULLS}/2", json={"title": "Better"}, headers=json_headers(tokens["mallory"])
        )
        listing = client.get(PULLS)

        assert edited.get_json()["data"]["title"] == "Better"
        assert [p["number"] for p in listing.get_json()["data"]] == [2, 1]
        assert client.get(f"{PULLS}/1").get_json()["data"]["head_branch"] == "a"
