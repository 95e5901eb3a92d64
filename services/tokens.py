"""Issue verification codes and password-reset tokens.

Both kinds are returned as an :class:`IssuedToken` carrying the value and
the moment it stops being accepted. Nothing here purges old tokens: callers
compare ``expires_at`` with the current time when looking a token up, so an
expired token stays stored until it is overwritten or cleared.
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import NamedTuple

VERIFICATION_CODE_MIN = 100000
VERIFICATION_CODE_MAX = 999999
RESET_TOKEN_BYTES = 20

DEFAULT_VERIFICATION_TTL = timedelta(hours=24)
DEFAULT_RESET_TTL = timedelta(hours=1)


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime, as stored in the database."""

    return datetime.now(UTC).replace(tzinfo=None)


class IssuedToken(NamedTuple):
    value: str
    expires_at: datetime


def issue_verification_code(ttl: timedelta = DEFAULT_VERIFICATION_TTL) -> IssuedToken:
    """Return a six digit numeric code drawn uniformly from 100000-999999."""

    span = VERIFICATION_CODE_MAX - VERIFICATION_CODE_MIN + 1
    code = VERIFICATION_CODE_MIN + secrets.randbelow(span)
    return IssuedToken(str(code), utcnow() + ttl)


def issue_reset_token(ttl: timedelta = DEFAULT_RESET_TTL) -> IssuedToken:
    """Return a hex encoded random reset token."""

    return IssuedToken(secrets.token_hex(RESET_TOKEN_BYTES), utcnow() + ttl)
