"""Mail backends and the notification dispatcher."""

from .abstract_mailer import AbstractMailer, OutgoingEmail
from .dispatcher import MailDispatcher, build_mailer
from .local_mailers import ConsoleMailer, MemoryMailer
from .smtp_mailer import SmtpMailer

__all__ = [
    "AbstractMailer",
    "OutgoingEmail",
    "MailDispatcher",
    "build_mailer",
    "ConsoleMailer",
    "MemoryMailer",
    "SmtpMailer",
]
