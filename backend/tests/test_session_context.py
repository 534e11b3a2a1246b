"""Tests for SessionContext and the route guard."""

import json
from urllib.parse import quote

import pytest

from workspace_manager.client.api import ApiError
from workspace_manager.client.session import SessionContext, resolve_redirect
from workspace_manager.core.constants import AUTH_COOKIE, USER_COOKIE
from workspace_manager.schemas.auth import LoginResponse, UserOut

JANE = UserOut(id="u1", email="jane@example.com", name="jane")


class FakeAuthApi:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.logins = []
        self.logouts = 0

    async def login(self, email, password):
        self.logins.append((email, password))
        if self.error is not None:
            raise self.error
        return LoginResponse(user=JANE, token="ws_sess_abc")

    async def logout(self):
        self.logouts += 1


def signed_in() -> SessionContext:
    session = SessionContext()
    session.initialize(
        {USER_COOKIE: quote(json.dumps({"id": "u1", "email": "jane@example.com", "name": "jane"})), AUTH_COOKIE: "tok"}
    )
    return session


def signed_out() -> SessionContext:
    session = SessionContext()
    session.initialize({})
    return session


# ── initialize ──────────────────────────────────────────────


def test_starts_loading_and_anonymous():
    session = SessionContext()
    assert session.is_loading
    assert not session.is_authenticated


def test_initialize_from_cookies():
    session = signed_in()
    assert not session.is_loading
    assert session.is_authenticated
    assert session.user == JANE
    assert session.token == "tok"


@pytest.mark.parametrize(
    "cookies",
    [
        {},
        {USER_COOKIE: quote(json.dumps({"id": "u1"}))},
        {USER_COOKIE: "not%20json", AUTH_COOKIE: "tok"},
        {USER_COOKIE: quote(json.dumps({"id": "u1"})), AUTH_COOKIE: "tok"},
    ],
)
def test_initialize_ignores_missing_or_malformed_cookies(cookies):
    session = SessionContext()
    session.initialize(cookies)
    assert not session.is_loading
    assert not session.is_authenticated
    assert session.token is None


def test_cookies_round_trip():
    restored = SessionContext()
    restored.initialize(signed_in().cookies())
    assert restored.user == JANE
    assert restored.token == "tok"
    assert signed_out().cookies() == {}


# ── login / teardown ────────────────────────────────────────


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("email", "password", "errors"),
    [
        ("", "secret123", {"email": "Email is required"}),
        ("jane@", "secret123", {"email": "Enter a valid email"}),
        ("jane@example.com", "12345", {"password": "Password must be at least 6 characters"}),
    ],
)
async def test_login_field_validation(email, password, errors):
    api = FakeAuthApi()
    session = SessionContext(login_call=api.login)
    session.initialize({})

    assert not await session.login(email, password)
    assert session.errors == errors
    assert api.logins == []


@pytest.mark.asyncio
async def test_login_success():
    api = FakeAuthApi()
    session = SessionContext(login_call=api.login)
    session.initialize({})

    assert await session.login(" jane@example.com ", "secret123")
    assert api.logins == [("jane@example.com", "secret123")]
    assert session.user == JANE
    assert session.token == "ws_sess_abc"
    assert session.errors == {}
    assert session.server_error == ""
    assert not session.is_loading


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "message"),
    [
        (ApiError(401, "Invalid credentials"), "Invalid credentials"),
        (ApiError(500, ""), "Login failed"),
        (RuntimeError("Network error"), "Network error"),
        (RuntimeError(), "Login failed"),
    ],
)
async def test_login_failure_messages(error, message):
    session = SessionContext(login_call=FakeAuthApi(error).login)
    session.initialize({})

    assert not await session.login("jane@example.com", "secret123")
    assert session.server_error == message
    assert not session.is_authenticated


@pytest.mark.asyncio
async def test_teardown_logs_out_and_returns_login_path():
    api = FakeAuthApi()
    session = SessionContext(login_call=api.login, logout_call=api.logout)
    session.initialize({})
    await session.login("jane@example.com", "secret123")

    assert await session.teardown() == "/login"
    assert api.logouts == 1
    assert not session.is_authenticated
    assert session.cookies() == {}


@pytest.mark.asyncio
async def test_teardown_survives_server_failure():
    async def failing_logout():
        raise ApiError(500, "down")

    session = signed_in()
    session._logout_call = failing_logout
    assert await session.teardown() == "/login"
    assert session.user is None


# ── Route guard ─────────────────────────────────────────────


def test_guard_waits_while_loading():
    assert resolve_redirect("/projects", SessionContext()) is None


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/", "/login"),
        ("/projects", "/login"),
        ("/projects/3", "/login"),
        ("/settings/billing", "/login"),
        ("/login", None),
        ("/about", None),
    ],
)
def test_guard_signed_out(path, expected):
    assert resolve_redirect(path, signed_out()) == expected


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/", "/projects"),
        ("/login", "/projects"),
        ("/projects", None),
        ("/settings", None),
        ("/about", None),
    ],
)
def test_guard_signed_in(path, expected):
    assert resolve_redirect(path, signed_in()) == expected
