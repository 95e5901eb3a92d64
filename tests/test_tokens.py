"""Tests for verification code and reset token issuance."""

from datetime import timedelta

from services import tokens
from services.tokens import issue_reset_token, issue_verification_code, utcnow


def test_verification_code_is_six_digits_with_day_expiry():
    before = utcnow()
    issued = issue_verification_code()

    assert issued.value.isdigit()
    assert len(issued.value) == 6
    assert 100000 <= int(issued.value) <= 999999
    assert before + timedelta(hours=24) <= issued.expires_at <= utcnow() + timedelta(hours=24)


def test_verification_code_covers_range_bounds(monkeypatch):
    monkeypatch.setattr(tokens.secrets, "randbelow", lambda n: 0)
    assert issue_verification_code().value == "100000"

    monkeypatch.setattr(tokens.secrets, "randbelow", lambda n: n - 1)
    assert issue_verification_code().value == "999999"


def test_reset_token_is_hex_with_hour_expiry():
    before = utcnow()
    issued = issue_reset_token()

    assert len(issued.value) == 40
    assert bytes.fromhex(issued.value)
    assert before + timedelta(hours=1) <= issued.expires_at <= utcnow() + timedelta(hours=1)
    assert issue_reset_token().value != issued.value


def test_custom_ttl():
    issued = issue_reset_token(timedelta(minutes=5))

    assert issued.expires_at <= utcnow() + timedelta(minutes=5)
    assert issued.expires_at > utcnow() + timedelta(minutes=4)
