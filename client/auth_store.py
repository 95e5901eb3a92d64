"""Client-side mirror of the server's authentication state.

:class:`AuthStore` wraps the ``/api/auth`` endpoints. Every action follows
the same pattern: flag loading and clear the previous error and message,
make one HTTP call, then publish either the new user/message or the error
reported by the server. State is an immutable :class:`AuthState`; each
change produces a new instance through one of the transition functions
below and is pushed to every subscriber.

Overlapping calls are not serialised. Whichever finishes last wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api/auth"
MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class AuthState:
    user: Optional[Dict[str, Any]] = None
    is_authenticated: bool = False
    error: Optional[str] = None
    is_loading: bool = False
    is_checking_auth: bool = True
    message: Optional[str] = None


def request_started(state: AuthState) -> AuthState:
    return replace(state, is_loading=True, error=None, message=None)


def request_failed(state: AuthState, error: str) -> AuthState:
    return replace(state, is_loading=False, error=error)


def loading_finished(state: AuthState) -> AuthState:
    return replace(state, is_loading=False)


def signed_in(state: AuthState, user: Optional[Dict[str, Any]], message: Optional[str] = None) -> AuthState:
    return replace(state, user=user, is_authenticated=True, is_loading=False, message=message)


def signed_out(state: AuthState) -> AuthState:
    return replace(state, user=None, is_authenticated=False, is_loading=False)


def message_received(state: AuthState, message: Optional[str]) -> AuthState:
    return replace(state, message=message, is_loading=False)


def auth_checked(state: AuthState, user: Optional[Dict[str, Any]]) -> AuthState:
    return replace(
        state,
        user=user,
        is_authenticated=user is not None,
        is_checking_auth=False,
        is_loading=False,
    )


def auth_check_failed(state: AuthState, error: str) -> AuthState:
    return replace(
        state,
        user=None,
        is_authenticated=False,
        is_checking_auth=False,
        is_loading=False,
        error=error,
    )


def check_reset_form(password: str, confirm_password: str) -> Optional[str]:
    """Return the problem with a new-password form, or None if it can be submitted."""

    if password != confirm_password:
        return "Passwords do not match"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    return None


class AuthStoreError(Exception):
    """Raised by a store action after its error has been published."""


Listener = Callable[[AuthState], None]


class AuthStore:
    """Observable authentication state backed by the auth HTTP API."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        # A supplied client must already carry the API base URL. Its cookie
        # jar holds the session between calls.
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._state = AuthState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` on every state change. Returns an unsubscribe function."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _apply(self, transition: Callable[..., AuthState], *args: Any) -> None:
        self._state = transition(self._state, *args)
        for listener in list(self._listeners):
            listener(self._state)

    async def _call(
        self,
        method: str,
        path: str,
        default_error: str,
        on_success: Callable[[AuthState, Dict[str, Any]], AuthState],
        json: Optional[Dict[str, Any]] = None,
        on_error: Callable[[AuthState, str], AuthState] = request_failed,
    ) -> Dict[str, Any]:
        try:
            self._apply(request_started)
            try:
                response = await self._client.request(method, path, json=json)
            except httpx.HTTPError as error:
                logger.warning("Auth request %s %s failed: %s", method, path, error)
                self._apply(on_error, default_error)
                raise AuthStoreError(default_error) from error

            data = _response_body(response)
            if response.is_error:
                message = data.get("message") or default_error
                self._apply(on_error, message)
                raise AuthStoreError(message)

            self._apply(on_success, data)
            return data
        finally:
            if self._state.is_loading:
                self._apply(loading_finished)

    async def signup(self, email: str, password: str, name: str) -> Dict[str, Any]:
        return await self._call(
            "POST",
            "/signup",
            "Error signing up",
            lambda state, data: signed_in(state, data.get("user"), data.get("message")),
            json={"email": email, "password": password, "name": name},
        )

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        return await self._call(
            "POST",
            "/login",
            "Error logging in",
            lambda state, data: signed_in(state, data.get("user"), data.get("message")),
            json={"email": email, "password": password},
        )

    async def logout(self) -> Dict[str, Any]:
        return await self._call(
            "POST", "/logout", "Error logging out", lambda state, data: signed_out(state)
        )

    async def verify_email(self, code: str) -> Dict[str, Any]:
        return await self._call(
            "POST",
            "/verify-email",
            "Error verifying email",
            lambda state, data: signed_in(state, data.get("user"), data.get("message")),
            json={"code": code},
        )

    async def forgot_password(self, email: str) -> Dict[str, Any]:
        return await self._call(
            "POST",
            "/forgot-password",
            "Error sending reset password email",
            lambda state, data: message_received(state, data.get("message")),
            json={"email": email},
        )

    async def reset_password(self, token: str, password: str) -> Dict[str, Any]:
        return await self._call(
            "POST",
            f"/reset-password/{quote(token, safe='')}",
            "Error resetting password",
            lambda state, data: message_received(state, data.get("message")),
            json={"password": password},
        )

    async def check_auth(self) -> Dict[str, Any]:
        return await self._call(
            "GET",
            "/check-auth",
            "Error checking authentication",
            lambda state, data: auth_checked(state, data.get("user")),
            on_error=auth_check_failed,
        )


    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AuthStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _response_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
