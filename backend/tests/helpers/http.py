"""HTTP helper utilities for API tests."""

from __future__ import annotations

API = "/api/v1"


def json_headers(auth_token: str | None = None) -> dict[str, str]:
    """Return standard JSON headers, with a bearer token when given."""

    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    return headers


def register(client, username: str, *, password: str = "password123") -> str:
    """Register ``username`` through the API and return its token."""

    resp = client.post(
        f"{API}/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": password},
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]["token"]


def assert_problem(resp, status: int, *, detail: str | None = None) -> dict:
    """Check an RFC 7807 error response and return its body."""

    assert resp.status_code == status, resp.get_json()
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["status"] == status
    if detail is not None:
        assert body["detail"] == detail
    return body
