"""Notification channels — SMTP email delivery."""

from __future__ import annotations

import abc
import asyncio
import smtplib
from email.message import EmailMessage
from email.utils import formatdate, make_msgid

import structlog

from taskwatch.core.config import MailConfig

logger = structlog.get_logger(__name__)


class Notifier(abc.ABC):
    """Base class for alert delivery."""

    @abc.abstractmethod
    async def send(self, to: list[str], subject: str, body: str) -> bool:
        """Send one message. Returns True on success."""

    async def close(self) -> None:
        """Release resources. No-op by default."""


class SmtpNotifier(Notifier):
    """Delivers plain-text email through an SMTP relay.

    ``smtplib`` is blocking, so each send runs in the default executor.
    A caller that stops waiting does not stop the worker thread, so
    ``timeout_secs`` bounds the socket and must stay below the caller's
    own send timeout. ``Settings`` enforces this when mail is enabled.
    """

    def __init__(self, config: MailConfig) -> None:
        self._host = config.host
        self._port = config.port
        self._starttls = config.starttls
        self._use_ssl = config.use_ssl
        self._username = config.username
        self._password = config.password.get_secret_value()
        self._sender = config.sender
        self._timeout = config.timeout_secs

    def build_message(self, to: list[str], subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._sender
        msg["To"] = ", ".join(to)
        msg["Subject"] = subject
        msg["Date"] = formatdate(localtime=False)
        msg["Message-ID"] = make_msgid(domain="taskwatch.local")
        msg.set_content(body)
        return msg

    async def send(self, to: list[str], subject: str, body: str) -> bool:
        if not to:
            logger.warning("smtp_send_skipped_no_recipients", subject=subject)
            return False

        msg = self.build_message(to, subject, body)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._send_blocking, msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning(
                "smtp_send_failed",
                host=self._host,
                port=self._port,
                recipients=to,
                error=str(exc),
            )
            return False
        logger.info("smtp_sent", recipients=to, subject=subject)
        return True

    def _send_blocking(self, msg: EmailMessage) -> None:
        smtp_cls = smtplib.SMTP_SSL if self._use_ssl else smtplib.SMTP
        with smtp_cls(self._host, self._port, timeout=self._timeout) as server:
            if self._starttls and not self._use_ssl:
                server.starttls()
            if self._username:
                server.login(self._username, self._password)
            server.send_message(msg)


class LogOnlyNotifier(Notifier):
    """Writes alerts to the log instead of sending them."""

    async def send(self, to: list[str], subject: str, body: str) -> bool:
        logger.info("email_logged", recipients=to, subject=subject, body=body)
        return True
