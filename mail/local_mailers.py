"""Mail backends that never leave the process."""

from __future__ import annotations

import logging
import threading

from .abstract_mailer import AbstractMailer, OutgoingEmail

logger = logging.getLogger(__name__)


class ConsoleMailer(AbstractMailer):
    """Write messages to the log instead of sending them. Used in development."""

    def send(self, email: OutgoingEmail) -> None:
        logger.info(
            "Email (%s) to %s\nSubject: %s\n\n%s",
            email.category,
            email.to,
            email.subject,
            email.body,
        )


class MemoryMailer(AbstractMailer):
    """Keep delivered messages in an in-memory outbox."""

    def __init__(self):
        self.outbox: list[OutgoingEmail] = []
        self._lock = threading.Lock()

    def send(self, email: OutgoingEmail) -> None:
        with self._lock:
            self.outbox.append(email)

    def sent_to(self, address: str, category: str | None = None) -> list[OutgoingEmail]:
        """Return messages addressed to ``address``, optionally of one category."""

        with self._lock:
            return [
                email
                for email in self.outbox
                if email.to == address and (category is None or email.category == category)
            ]

    def clear(self) -> None:
        with self._lock:
            self.outbox.clear()
