# apps/outreach/transport.py

"""Mail Transport collaborator."""

import logging
import smtplib
from dataclasses import dataclass
from email.utils import formataddr
from typing import Protocol

from django.conf import settings
from django.core.mail import EmailMessage, get_connection

from .errors import TransportError

logger = logging.getLogger(__name__)

# SMTP reply codes that mean the mailbox or domain does not exist
HARD_BOUNCE_CODES = {550, 551, 553, 554}


@dataclass
class OutgoingMessage:
    to_email: str
    subject: str
    body: str
    to_name: str = ""
    preheader: str = ""


class MailTransport(Protocol):
    def send(self, account, message: OutgoingMessage) -> None:
        """Deliver or raise TransportError."""
        ...


def classify_smtp_error(error: Exception) -> TransportError:
    if isinstance(error, smtplib.SMTPRecipientsRefused):
        codes = [code for code, _ in error.recipients.values()]
        hard = any(code in HARD_BOUNCE_CODES for code in codes)
        return TransportError(
            f"Recipient refused: {error.recipients}",
            permanent=hard,
            bounce_type="hard" if hard else "soft",
        )
    if isinstance(error, smtplib.SMTPAuthenticationError):
        return TransportError(f"SMTP authentication failed ({error.smtp_code})")
    if isinstance(error, smtplib.SMTPResponseException):
        code = error.smtp_code
        if code in HARD_BOUNCE_CODES:
            return TransportError(f"SMTP {code}: {error.smtp_error!r}", permanent=True, bounce_type="hard")
        if 400 <= code < 500:
            return TransportError(f"SMTP {code}: {error.smtp_error!r}", bounce_type="soft")
        return TransportError(f"SMTP {code}: {error.smtp_error!r}", permanent=code >= 500)
    return TransportError(f"{error.__class__.__name__}: {error}")


class DjangoMailTransport:
    """
    Sends through Django's mail machinery with one connection per account.
    The backend class comes from ``LEADMAILER_EMAIL_BACKEND``.
    """

    def get_connection(self, account):
        credentials = getattr(settings, "LEADMAILER_SMTP_CREDENTIALS", {}) or {}
        return get_connection(
            backend=getattr(settings, "LEADMAILER_EMAIL_BACKEND", None),
            fail_silently=False,
            host=account.host,
            port=account.port,
            username=account.username,
            password=credentials.get(account.credentials_key, ""),
            use_tls=account.use_tls,
            timeout=30,
        )

    def send(self, account, message: OutgoingMessage) -> None:
        email = EmailMessage(
            subject=message.subject,
            body=message.body,
            from_email=formataddr((account.from_name, account.from_address)),
            to=[formataddr((message.to_name, message.to_email))],
            connection=self.get_connection(account),
        )
        try:
            accepted = email.send()
        except (smtplib.SMTPException, OSError) as e:
            raise classify_smtp_error(e) from e

        if not accepted:
            raise TransportError("Message was not accepted by the mail backend")
        logger.debug(f"Delivered to {message.to_email} via {account.name}")
