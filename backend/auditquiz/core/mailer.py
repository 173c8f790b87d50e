"""
Audit Quiz Platform - Mail Delivery
SMTP transport for invitation emails, with a logging stand-in for
development when no SMTP host is configured.
"""
import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

from auditquiz.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class MailMessage:
    """An outgoing email."""
    to: str
    subject: str
    text: str
    html: str | None = None


class Mailer:
    """Interface for mail transports."""

    async def send(self, message: MailMessage) -> None:
        raise NotImplementedError


class SMTPMailer(Mailer):
    """Sends mail through an SMTP relay on a worker thread."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        sender: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender

    def _build(self, message: MailMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content(message.text)
        if message.html:
            email.add_alternative(message.html, subtype="html")
        return email

    def _send_sync(self, email: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(email)

    async def send(self, message: MailMessage) -> None:
        await asyncio.to_thread(self._send_sync, self._build(message))
        logger.info("Sent mail to %s: %s", message.to, message.subject)


class LoggingMailer(Mailer):
    """Logs messages instead of delivering them."""

    async def send(self, message: MailMessage) -> None:
        logger.info(
            "Mail delivery disabled; would send to %s: %s\n%s",
            message.to,
            message.subject,
            message.text,
        )


def get_mailer() -> Mailer:
    """Dependency returning the configured mail transport."""
    if not settings.SMTP_HOST:
        return LoggingMailer()
    return SMTPMailer(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_USE_TLS,
        sender=settings.MAIL_FROM,
    )
