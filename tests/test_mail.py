"""Tests for mail backends and the notification dispatcher."""

from __future__ import annotations

import pytest

from conftest import build_app
from mail import ConsoleMailer, MemoryMailer, OutgoingEmail, SmtpMailer, build_mailer
from mail import templates
from mail.dispatcher import MailDispatcher


class _FakeSMTP:
    instances: list["_FakeSMTP"] = []

    def __init__(self, server, port, timeout=None):
        self.server = server
        self.port = port
        self.calls: list[tuple] = []
        _FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        self.calls.append(("starttls",))

    def login(self, username, password):
        self.calls.append(("login", username, password))

    def send_message(self, message):
        self.calls.append(("send", message["To"], message["Subject"], message["From"]))


def test_build_mailer_selects_backend():
    assert isinstance(build_mailer({"MAIL_BACKEND": "memory"}), MemoryMailer)
    assert isinstance(build_mailer({"MAIL_BACKEND": "console"}), ConsoleMailer)
    smtp = build_mailer(
        {
            "MAIL_BACKEND": "smtp",
            "SMTP_SERVER": "smtp.example.com",
            "SMTP_PORT": "2525",
            "MAIL_SENDER": "auth@example.com",
        }
    )
    assert isinstance(smtp, SmtpMailer)
    assert smtp.port == 2525

    with pytest.raises(ValueError):
        build_mailer({"MAIL_BACKEND": "pigeon"})


def test_smtp_mailer_sends_with_tls_and_login(monkeypatch):
    _FakeSMTP.instances.clear()
    monkeypatch.setattr("mail.smtp_mailer.smtplib.SMTP", _FakeSMTP)
    mailer = SmtpMailer(
        server="smtp.example.com",
        port=587,
        sender="auth@example.com",
        username="user",
        password="pass",
    )

    mailer.send(templates.reset_success_email("a@b.com"))

    [connection] = _FakeSMTP.instances
    assert connection.server == "smtp.example.com"
    assert connection.calls == [
        ("starttls",),
        ("login", "user", "pass"),
        ("send", "a@b.com", "Password reset successful", "auth@example.com"),
    ]


def test_templates_carry_links_and_codes():
    assert "482913" in templates.verification_email("a@b.com", "482913").body
    reset = templates.password_reset_email("a@b.com", "https://client.example/reset-password/abc")
    assert "https://client.example/reset-password/abc" in reset.body
    assert reset.category == templates.PASSWORD_RESET


def test_dispatch_inline_swallows_failures(app, mailer, monkeypatch, caplog):
    dispatcher = MailDispatcher()

    def _broken_send(email):
        raise RuntimeError("boom")

    monkeypatch.setattr(mailer, "send", _broken_send)
    with app.app_context():
        assert dispatcher.send_welcome_email("a@b.com", "A") is None

    assert "Failed to send welcome email to a@b.com" in caplog.text


def test_dispatch_in_background():
    app = build_app(MAIL_ASYNC=True)
    dispatcher = MailDispatcher()

    with app.app_context():
        future = dispatcher.dispatch(
            OutgoingEmail(to="a@b.com", subject="Hi", body="Hello", category="test")
        )
        assert future.result(timeout=5) is True
        assert dispatcher.mailer.sent_to("a@b.com", "test")
