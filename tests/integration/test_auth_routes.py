"""Integration tests for account endpoints."""

import inspect
from collections.abc import Callable

from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from backend.app.api.auth import ensure_visitor_session, get_current_user_id, get_visitor_session
from backend.app.db.repositories import UserRecord
from backend.app.main import app
from backend.app.middleware.ratelimit import enforce_rate_limit


def test_register_logs_in(client: TestClient) -> None:
    """Test registering returns the user and starts a logged-in session."""
    response = client.post("/api/register", json={"email": "owner@example.com", "pin": "2468"})

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "owner@example.com"
    assert "pin_hash" not in data
    assert "docshare_session" in client.cookies

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["id"] == data["id"]


def test_register_rejects_bad_pin(client: TestClient) -> None:
    """Test a non-numeric PIN is a 400."""
    response = client.post("/api/register", json={"email": "owner@example.com", "pin": "abcd"})

    assert response.status_code == 400
    assert response.json()["detail"] == "PIN must be 4 to 12 digits"


def test_register_duplicate_email(client: TestClient, make_user: Callable[[str], UserRecord]) -> None:
    """Test registering a taken email is a 409."""
    make_user("owner@example.com")

    response = client.post("/api/register", json={"email": "owner@example.com", "pin": "2468"})

    assert response.status_code == 409


def test_login_and_logout(
    client: TestClient,
    make_user: Callable[[str], UserRecord],
    login: Callable[..., None],
) -> None:
    """Test login sets the owner identity and logout clears it."""
    user = make_user("owner@example.com")

    assert client.get("/api/user").status_code == 401

    login(client, "owner@example.com")
    assert client.get("/api/user").json() == {"id": user.id, "email": "owner@example.com"}

    assert client.post("/api/logout").status_code == 204
    assert client.get("/api/user").status_code == 401


def test_login_wrong_pin_and_unknown_email_look_the_same(
    client: TestClient, make_user: Callable[[str], UserRecord]
) -> None:
    """Test failed logins do not reveal whether the email exists."""
    make_user("owner@example.com")

    wrong_pin = client.post("/api/login", json={"email": "owner@example.com", "pin": "0000"})
    unknown = client.post("/api/login", json={"email": "nobody@example.com", "pin": "1234"})

    assert wrong_pin.status_code == unknown.status_code == 401
    assert wrong_pin.json() == unknown.json() == {"detail": "Invalid credentials"}


def test_logout_without_session(client: TestClient) -> None:
    """Test logout is harmless without a session."""
    assert client.post("/api/logout").status_code == 204


def test_api_endpoints_run_in_threadpool() -> None:
    """Test /api endpoints and their dependencies are plain functions.

    FastAPI runs plain functions in its threadpool, which keeps blocking store,
    Redis and scrypt calls off the event loop.
    """
    api_routes = [
        route
        for route in app.routes
        if isinstance(route, APIRoute) and route.path.startswith("/api")
    ]
    assert api_routes

    for route in api_routes:
        assert not inspect.iscoroutinefunction(route.endpoint), route.path

    for dependency in (
        get_visitor_session,
        ensure_visitor_session,
        get_current_user_id,
        enforce_rate_limit,
    ):
        assert not inspect.iscoroutinefunction(dependency)
