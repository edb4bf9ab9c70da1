"""Integration tests for authentication and profile endpoints."""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import select

from devit.infra.jwt.flask_jwt_token_codec import JWTTokenCodec
from devit.models import Account
from devit.services._shared.ports import TokenSubject
from tests.factories.account import AccountFactory
from tests.helpers.http import API, assert_problem, json_headers, register


def test_register_returns_token_and_public_account(client):
    resp = client.post(
        f"{API}/auth/register",
        json={"username": "alice", "email": "Alice@Example.com", "password": "password123"},
    )

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["token"]
    assert data["token_type"] == "Bearer"
    assert data["user"]["username"] == "alice"
    assert data["user"]["email"] == "alice@example.com"
    assert "password_hash" not in data["user"]
    assert "password" not in data["user"]


def test_register_validation_is_a_400(client):
    resp = client.post(
        f"{API}/auth/register", json={"username": "alice", "email": "alice@example.com"}
    )

    assert_problem(resp, 400, detail="Username, email, and password are required")


def test_register_duplicate_is_a_409(client):
    register(client, "alice")

    resp = client.post(
        f"{API}/auth/register",
        json={"username": "alice", "email": "other@example.com", "password": "password123"},
    )

    assert_problem(resp, 409)


def test_login_with_username_or_email(client, session):
    AccountFactory(username="bob", email="bob@example.com", password="hunter22")
    session.commit()

    by_name = client.post(f"{API}/auth/login", json={"username": "bob", "password": "hunter22"})
    by_mail = client.post(
        f"{API}/auth/login", json={"username_or_email": "bob@example.com", "password": "hunter22"}
    )

    assert by_name.status_code == 200
    assert by_mail.status_code == 200
    assert by_name.get_json()["data"]["user"]["username"] == "bob"


def test_login_failures_share_one_message(client, session):
    AccountFactory(username="bob", password="hunter22")
    session.commit()

    wrong = client.post(f"{API}/auth/login", json={"username": "bob", "password": "nope-nope"})
    unknown = client.post(f"{API}/auth/login", json={"username": "zed", "password": "hunter22"})

    assert_problem(wrong, 401, detail="Invalid credentials")
    assert_problem(unknown, 401, detail="Invalid credentials")


def test_me_and_refresh(client):
    token = register(client, "carol")

    me = client.get(f"{API}/auth/me", headers=json_headers(token))
    refreshed = client.post(f"{API}/auth/refresh", headers=json_headers(token))

    assert me.status_code == 200
    assert me.get_json()["data"]["username"] == "carol"
    assert refreshed.status_code == 200
    new_token = refreshed.get_json()["data"]["token"]
    again = client.get(f"{API}/auth/me", headers=json_headers(new_token))
    assert again.get_json()["data"]["id"] == me.get_json()["data"]["id"]


def test_missing_or_malformed_header_is_a_401(client):
    assert_problem(
        client.get(f"{API}/auth/me"), 401, detail="Authorization header missing or invalid"
    )
    assert_problem(
        client.get(f"{API}/auth/me", headers={"Authorization": "Token abc"}),
        401,
        detail="Authorization header missing or invalid",
    )


def test_bad_or_expired_token_is_a_401(client, app, session):
    account = AccountFactory()
    session.commit()
    expired = JWTTokenCodec().issue(
        TokenSubject(account_id=account.id, username=account.username, email=account.email),
        ttl=timedelta(seconds=-1),
    )

    for token in ("garbage", expired):
        assert_problem(
            client.get(f"{API}/auth/me", headers=json_headers(token)),
            401,
            detail="Invalid or expired token",
        )


def test_token_of_deleted_account_stops_working(client, session):
    token = register(client, "dana")
    account = session.execute(select(Account).filter_by(username="dana")).scalar_one()
    session.delete(account)
    session.commit()

    assert_problem(
        client.get(f"{API}/auth/me", headers=json_headers(token)),
        401,
        detail="Invalid or expired token",
    )


def test_logout_is_stateless(client):
    resp = client.post(f"{API}/auth/logout")

    assert resp.status_code == 200
    assert resp.get_json()["data"]["message"] == "Logged out successfully"


def test_profile_read_and_self_update(client):
    token = register(client, "erin")
    other = register(client, "frank")

    public = client.get(f"{API}/users/erin")
    updated = client.patch(
        f"{API}/users/erin", json={"bio": "Hi"}, headers=json_headers(token)
    )
    forbidden = client.patch(
        f"{API}/users/erin", json={"bio": "Hacked"}, headers=json_headers(other)
    )

    assert public.status_code == 200
    assert public.get_json()["data"]["username"] == "erin"
    assert updated.get_json()["data"]["bio"] == "Hi"
    assert_problem(forbidden, 403, detail="You can only update your own profile")
    assert_problem(client.get(f"{API}/users/ghost"), 404)


def test_user_listing_and_search(client):
    for name in ("kate", "liam", "katrina"):
        register(client, name)

    page = client.get(f"{API}/users?limit=2")
    rest = client.get(f"{API}/users?limit=2&offset=2")
    found = client.get(f"{API}/users?q=KAT")
    legacy = client.get(f"{API}/users?search=liam")

    assert page.status_code == 200
    assert len(page.get_json()["data"]) == 2
    assert len(rest.get_json()["data"]) == 1
    assert sorted(u["username"] for u in found.get_json()["data"]) == ["kate", "katrina"]
    assert [u["username"] for u in legacy.get_json()["data"]] == ["liam"]
    assert all("password_hash" not in u for u in page.get_json()["data"])


def test_user_listing_rejects_bad_paging(client):
    assert_problem(client.get(f"{API}/users?limit=0"), 400, detail="limit must be at least 1")
    assert client.get(f"{API}/users?limit=many").status_code == 422


def test_health(client):
    resp = client.get(f"{API}/health")

    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"
    assert resp.get_json()["checks"] == {"database": "ok", "tokens": "ok"}
