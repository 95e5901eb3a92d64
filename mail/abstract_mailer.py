"""Mail backend abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    body: str
    category: str


class AbstractMailer(ABC):
    """Interface for mail backends."""

    @abstractmethod
    def send(self, email: OutgoingEmail) -> None:
        """Deliver a message or raise if the backend rejects it."""
