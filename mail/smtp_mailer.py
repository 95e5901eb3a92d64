"""SMTP mail backend."""

from __future__ import annotations

import logging
import smtplib
from email.mime.text import MIMEText

from .abstract_mailer import AbstractMailer, OutgoingEmail

logger = logging.getLogger(__name__)


class SmtpMailer(AbstractMailer):
    """Send plain-text messages through an SMTP relay."""

    def __init__(
        self,
        server: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.server = server
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _build_message(self, email: OutgoingEmail) -> MIMEText:
        message = MIMEText(email.body, "plain")
        message["From"] = self.sender
        message["To"] = email.to
        message["Subject"] = email.subject
        return message

    def send(self, email: OutgoingEmail) -> None:
        message = self._build_message(email)
        with smtplib.SMTP(self.server, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(message)

        logger.info("Sent %s email to %s", email.category, email.to)
