"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from typing import Iterable

from flask import Request

from utils.errors import ValidationError


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    numeric_keys: Iterable[str] = (),
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error.

    Every key in ``required_keys`` must hold a non-blank string. Keys also
    listed in ``numeric_keys`` may hold an integer instead.
    """

    if not req.is_json:
        raise ValidationError("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise ValidationError("Request JSON body is required.")

    if not isinstance(data, dict):
        raise ValidationError("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise ValidationError("Request JSON body must not be empty.")

    if required_keys:
        required_keys = list(required_keys)
        numeric_keys = set(numeric_keys)
        missing = [key for key in required_keys if _is_blank(data.get(key))]
        if missing:
            raise ValidationError(
                "Missing required fields: {}.".format(
                    ", ".join(sorted(missing))
                )
            )

        malformed = [
            key
            for key in required_keys
            if not _has_type(data[key], numeric=key in numeric_keys)
        ]
        if malformed:
            raise ValidationError(
                "Fields must be strings: {}.".format(
                    ", ".join(sorted(malformed))
                )
            )

    return data


def _is_blank(value: object) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return value is None


def _has_type(value: object, *, numeric: bool) -> bool:
    if isinstance(value, str):
        return True
    return numeric and isinstance(value, int) and not isinstance(value, bool)


def normalize_email(raw_email: object) -> str:
    """Strip and lower-case an email address, rejecting non-strings and blanks."""

    if not isinstance(raw_email, str) or not raw_email.strip():
        raise ValidationError("Email must be a non-empty string.")
    return raw_email.strip().lower()
