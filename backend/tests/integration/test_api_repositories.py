"""Integration tests for repository endpoints."""

from __future__ import annotations

from tests.helpers.http import API, assert_problem, json_headers, register


def _create(client, token, **payload):
    return client.post(f"{API}/repos", json=payload, headers=json_headers(token))


def test_create_and_fetch_repository(client):
    token = register(client, "alice")

    created = _create(client, token, name="proj", description="Demo")
    fetched = client.get(f"{API}/repos/alice/proj")

    assert created.status_code == 201
    body = created.get_json()["data"]
    assert body["full_name"] == "alice/proj"
    assert body["owner"] == "alice"
    assert body["default_branch"] == "main"
    assert fetched.get_json()["data"]["id"] == body["id"]


def test_create_requires_authentication(client):
    assert_problem(client.post(f"{API}/repos", json={"name": "proj"}), 401)


def test_duplicate_name_is_a_409(client):
    token = register(client, "alice")
    _create(client, token, name="proj")

    assert_problem(_create(client, token, name="proj"), 409)


def test_invalid_name_is_a_400(client):
    token = register(client, "alice")

    assert_problem(_create(client, token, name=""), 400, detail="Repository name is required")


def test_wrong_field_type_is_a_422(client):
    token = register(client, "alice")

    resp = _create(client, token, name="proj", is_private="maybe")

    body = assert_problem(resp, 422)
    assert "is_private" in body["details"]["errors"]


def test_only_owner_can_update_or_delete(client):
    owner = register(client, "alice")
    stranger = register(client, "mallory")
    _create(client, owner, name="proj")

    assert_problem(
        client.patch(f"{API}/repos/alice/proj", json={"description": "x"}, headers=json_headers(stranger)),
        403,
        detail="Unauthorized to update this repository",
    )
    assert_problem(
        client.delete(f"{API}/repos/alice/proj", headers=json_headers(stranger)),
        403,
        detail="Unauthorized to delete this repository",
    )

    updated = client.patch(
        f"{API}/repos/alice/proj", json={"description": "Owned"}, headers=json_headers(owner)
    )
    assert updated.get_json()["data"]["description"] == "Owned"

    deleted = client.delete(f"{API}/repos/alice/proj", headers=json_headers(owner))
    assert deleted.status_code == 200
    assert_problem(client.get(f"{API}/repos/alice/proj"), 404)


def test_user_repository_listing_hides_private_from_others(client):
    owner = register(client, "alice")
    viewer = register(client, "bob")
    _create(client, owner, name="open")
    _create(client, owner, name="hidden", is_private=True)

    def names(headers=None):
        resp = client.get(f"{API}/users/alice/repos", headers=headers or {})
        return {r["name"] for r in resp.get_json()["data"]}

    assert names(json_headers(owner)) == {"open", "hidden"}
    assert names(json_headers(viewer)) == {"open"}
    assert names() == {"open"}


def test_unknown_route_is_a_problem_document(client):
    assert_problem(client.get(f"{API}/nowhere"), 404)
