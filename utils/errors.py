"""Client-facing authentication errors.

Every error here is a 400 with a fixed, caller-safe message; the app
factory's HTTPException handler turns them into JSON bodies.
"""

from __future__ import annotations

from werkzeug.exceptions import BadRequest


class ValidationError(BadRequest):
    description = "All fields are required."


class EmailAlreadyRegistered(BadRequest):
    description = "User already exists."


class InvalidCredentials(BadRequest):
    # Same message for unknown email and wrong password.
    description = "Invalid credentials."


class UserNotFound(BadRequest):
    description = "User not found."


class InvalidToken(BadRequest):
    description = "Invalid or expired token."
