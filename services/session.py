"""Session cookie helpers built on flask-jwt-extended."""

from __future__ import annotations

from flask import Response
from flask_jwt_extended import (
    create_access_token,
    get_jwt_identity,
    set_access_cookies,
    unset_jwt_cookies,
)


def issue_session(response: Response, user_id: int) -> str:
    """Sign a token for ``user_id`` and store it on the response as a cookie.

    Cookie name, lifetime and the ``Secure``/``HttpOnly`` flags come from the
    ``JWT_*`` configuration keys.
    """

    token = create_access_token(identity=str(user_id))
    set_access_cookies(response, token)
    return token


def clear_session(response: Response) -> None:
    unset_jwt_cookies(response)


def current_user_id() -> int | None:
    """Return the user id carried by the verified session token, if any."""

    identity = get_jwt_identity()
    if identity is None:
        return None
    try:
        return int(identity)
    except (TypeError, ValueError):
        return None
