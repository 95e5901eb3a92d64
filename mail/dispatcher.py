"""Best-effort delivery of account notification emails.

Messages are handed to a small thread pool and the request carries on
without waiting. A failed delivery is logged and otherwise ignored: the
database change that triggered the email is what counts.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Mapping, Optional

from flask import Flask, current_app

from . import templates
from .abstract_mailer import AbstractMailer, OutgoingEmail
from .local_mailers import ConsoleMailer, MemoryMailer
from .smtp_mailer import SmtpMailer

logger = logging.getLogger(__name__)

EXTENSION_KEY = "mail_dispatcher"


def build_mailer(config: Mapping) -> AbstractMailer:
    """Return the mail backend selected by ``MAIL_BACKEND``."""

    backend = (config.get("MAIL_BACKEND") or "console").strip().lower()
    if backend == "smtp":
        return SmtpMailer(
            server=config["SMTP_SERVER"],
            port=int(config["SMTP_PORT"]),
            sender=config["MAIL_SENDER"],
            username=config.get("SMTP_USERNAME"),
            password=config.get("SMTP_PASSWORD"),
            use_tls=config.get("SMTP_USE_TLS", True),
        )
    if backend == "memory":
        return MemoryMailer()
    if backend == "console":
        return ConsoleMailer()
    raise ValueError(f"Unknown MAIL_BACKEND: {backend!r}")


def _deliver(mailer: AbstractMailer, email: OutgoingEmail) -> bool:
    try:
        mailer.send(email)
    except Exception:
        logger.exception("Failed to send %s email to %s", email.category, email.to)
        return False
    return True


@dataclass
class _MailState:
    mailer: AbstractMailer
    executor: Optional[ThreadPoolExecutor]


class MailDispatcher:
    """Flask extension owning the mail backend and its delivery pool."""

    def __init__(self, app: Flask | None = None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        mailer = build_mailer(app.config)
        executor = None
        if app.config.get("MAIL_ASYNC", True):
            executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="mail")
        app.extensions[EXTENSION_KEY] = _MailState(mailer=mailer, executor=executor)

    @staticmethod
    def _state() -> _MailState:
        return current_app.extensions[EXTENSION_KEY]

    @property
    def mailer(self) -> AbstractMailer:
        return self._state().mailer

    def dispatch(self, email: OutgoingEmail) -> Future | None:
        """Queue ``email`` for delivery, or deliver inline when MAIL_ASYNC is off.

        Neither path raises on a delivery failure.
        """

        state = self._state()
        if state.executor is None:
            _deliver(state.mailer, email)
            return None
        return state.executor.submit(_deliver, state.mailer, email)

    def send_verification_email(self, to: str, code: str) -> Future | None:
        return self.dispatch(templates.verification_email(to, code))

    def send_welcome_email(self, to: str, name: str) -> Future | None:
        return self.dispatch(templates.welcome_email(to, name))

    def send_password_reset_email(self, to: str, reset_url: str) -> Future | None:
        return self.dispatch(templates.password_reset_email(to, reset_url))

    def send_reset_success_email(self, to: str) -> Future | None:
        return self.dispatch(templates.reset_success_email(to))
