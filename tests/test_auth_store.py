"""Tests for the client-side auth store."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from client import AuthState, AuthStore, AuthStoreError, check_reset_form
from client.auth_store import request_started, signed_in

API_URL = "http://testserver/api/auth"
USER = {"id": 1, "email": "a@b.com", "name": "A", "is_verified": False}


def _store(handler) -> AuthStore:
    client = httpx.AsyncClient(base_url=API_URL, transport=httpx.MockTransport(handler))
    return AuthStore(client=client)


def _run(coro):
    return asyncio.run(coro)


def test_initial_state():
    state = AuthState()

    assert state.user is None
    assert state.is_authenticated is False
    assert state.is_loading is False
    assert state.is_checking_auth is True


def test_transitions_are_pure():
    before = AuthState(error="old", message="old")

    after = request_started(before)

    assert before.error == "old"
    assert after.is_loading is True
    assert after.error is None
    assert after.message is None
    assert signed_in(after, USER).user == USER


def test_signup_success_updates_state_and_notifies():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            201,
            json={"success": True, "message": "User created successfully.", "user": USER},
        )

    store = _store(handler)
    seen: list[AuthState] = []
    store.subscribe(seen.append)

    data = _run(store.signup("a@b.com", "secret1", "A"))

    assert data["user"] == USER
    [request] = requests
    assert request.method == "POST"
    assert request.url.path == "/api/auth/signup"
    assert json.loads(request.content) == {"email": "a@b.com", "password": "secret1", "name": "A"}

    assert [state.is_loading for state in seen] == [True, False]
    assert store.state.user == USER
    assert store.state.is_authenticated is True
    assert store.state.error is None


def test_server_error_message_is_published_and_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"success": False, "message": "Invalid credentials."})

    store = _store(handler)

    with pytest.raises(AuthStoreError, match="Invalid credentials."):
        _run(store.login("x@y.com", "secret1"))

    assert store.state.error == "Invalid credentials."
    assert store.state.is_loading is False
    assert store.state.is_authenticated is False


def test_default_message_when_server_sends_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad gateway")

    store = _store(handler)

    with pytest.raises(AuthStoreError):
        _run(store.verify_email("123456"))

    assert store.state.error == "Error verifying email"


def test_network_failure_uses_default_message():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    store = _store(handler)

    with pytest.raises(AuthStoreError):
        _run(store.forgot_password("a@b.com"))

    assert store.state.error == "Error sending reset password email"
    assert store.state.is_loading is False


def test_forgot_and_reset_publish_message():
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={"success": True, "message": f"ok {len(paths)}"})

    store = _store(handler)

    _run(store.forgot_password("a@b.com"))
    assert store.state.message == "ok 1"

    _run(store.reset_password("abc123", "new-secret"))
    assert store.state.message == "ok 2"
    assert paths == ["/api/auth/forgot-password", "/api/auth/reset-password/abc123"]


def test_error_is_cleared_by_next_action():
    responses = iter(
        [
            httpx.Response(400, json={"success": False, "message": "Invalid credentials."}),
            httpx.Response(200, json={"success": True, "message": "Logged in successfully.", "user": USER}),
        ]
    )

    store = _store(lambda request: next(responses))

    with pytest.raises(AuthStoreError):
        _run(store.login("a@b.com", "wrong"))
    _run(store.login("a@b.com", "secret1"))

    assert store.state.error is None
    assert store.state.user == USER


def test_logout_resets_user():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/login"):
            return httpx.Response(200, json={"success": True, "user": USER})
        return httpx.Response(200, json={"success": True, "message": "Logged out successfully."})

    store = _store(handler)

    _run(store.login("a@b.com", "secret1"))
    _run(store.logout())

    assert store.state.user is None
    assert store.state.is_authenticated is False


def test_check_auth_success_and_failure():
    responses = iter(
        [
            httpx.Response(200, json={"success": True, "user": USER}),
            httpx.Response(401, json={"success": False, "message": "Unauthorized - no token provided."}),
        ]
    )
    store = _store(lambda request: next(responses))

    _run(store.check_auth())
    assert store.state.user == USER
    assert store.state.is_authenticated is True
    assert store.state.is_checking_auth is False

    with pytest.raises(AuthStoreError):
        _run(store.check_auth())
    assert store.state.user is None
    assert store.state.is_authenticated is False
    assert store.state.error == "Unauthorized - no token provided."


def test_loading_cleared_when_listener_fails():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"success": True, "user": USER})

    store = _store(handler)
    seen: list[AuthState] = []

    def listener(state: AuthState) -> None:
        seen.append(state)
        if state.is_loading:
            raise RuntimeError("render failed")

    store.subscribe(listener)

    with pytest.raises(RuntimeError, match="render failed"):
        _run(store.login("a@b.com", "secret1"))

    assert requests == []
    assert store.state.is_loading is False
    assert [state.is_loading for state in seen] == [True, False]


def test_unsubscribe_stops_notifications():
    store = _store(lambda request: httpx.Response(200, json={"success": True}))
    seen: list[AuthState] = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()

    _run(store.logout())

    assert seen == []


@pytest.mark.parametrize(
    "password, confirm, problem",
    [
        ("secret1", "secret2", "Passwords do not match"),
        ("short", "short", "Password must be at least 6 characters long"),
        ("secret1", "secret1", None),
    ],
)
def test_check_reset_form(password, confirm, problem):
    assert check_reset_form(password, confirm) == problem
