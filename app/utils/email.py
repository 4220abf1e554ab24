"""
utils/email.py

Outbound transactional email.

- ``SMTPEmailSender`` delivers through an SMTP relay (run in the threadpool so
  the event loop is never blocked).
- ``ConsoleEmailSender`` logs the message instead; the default for development.

Every notification is best effort: callers go through ``notify`` which logs
and swallows delivery failures so a committed write is never reported as a
failed request.
"""

import logging
import smtplib
from abc import ABC, abstractmethod
from email.mime.text import MIMEText
from email.utils import formataddr
from functools import lru_cache

from starlette.concurrency import run_in_threadpool

from app.core.config import settings

log = logging.getLogger("wynngrid.email")


def mask_email(email: str) -> str:
    local, _, domain = (email or "").partition("@")
    return f"{local[:3]}***@{domain}" if domain else "***"


class EmailSender(ABC):
    """Accepts (recipient, subject, body) and delivers it."""

    @abstractmethod
    async def send(self, to: str, subject: str, body: str) -> None:
        ...

    def format_subject(self, subject: str) -> str:
        prefix = settings.EMAIL_SUBJECT_PREFIX
        return f"{prefix} - {subject}" if prefix else subject


class ConsoleEmailSender(EmailSender):
    """Logs the email instead of sending it. Never use in production."""

    async def send(self, to: str, subject: str, body: str) -> None:
        log.info(
            "[CONSOLE EMAIL] to=%s subject=%r\n%s",
            to, self.format_subject(subject), body,
        )


class SMTPEmailSender(EmailSender):

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        from_email: str = "",
        from_name: str = "Wynngrid",
        timeout: int = 15,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username
        self.from_name = from_name
        self.timeout = timeout

    def _build_message(self, to: str, subject: str, body: str) -> MIMEText:
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = self.format_subject(subject)
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = to
        return msg

    def _send_sync(self, to: str, subject: str, body: str) -> None:
        msg = self._build_message(to, subject, body)
        if self.port == 465:
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        with server:
            if self.port != 465:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.sendmail(self.from_email, [to], msg.as_string())

    async def send(self, to: str, subject: str, body: str) -> None:
        await run_in_threadpool(self._send_sync, to, subject, body)
        log.info("Email %r sent to %s", subject, mask_email(to))


async def notify(sender: EmailSender, to: str, subject: str, body: str) -> bool:
    """Send an email; return False (after logging) instead of raising on failure."""
    if not to or not to.strip():
        log.warning("Skipping email %r: no recipient", subject)
        return False
    try:
        await sender.send(to, subject, body)
        return True
    except Exception:
        log.exception("Failed to send email %r to %s", subject, mask_email(to))
        return False


@lru_cache
def get_email_sender() -> EmailSender:
    if settings.EMAIL_BACKEND == "smtp":
        if not settings.SMTP_HOST:
            log.warning("EMAIL_BACKEND=smtp but SMTP_HOST is not set")
        return SMTPEmailSender(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASS,
            from_email=settings.SMTP_FROM,
        )
    return ConsoleEmailSender()
