"""Outbound email transport."""

from __future__ import annotations

import logging
import smtplib
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from email.message import EmailMessage
from typing import Optional

logger = logging.getLogger(__name__)


class Mailer(ABC):
    """Interface for mail transports."""

    @abstractmethod
    def send(self, to: str, subject: str, html: str) -> None:
        """Deliver one message, raising on transport failure."""

    def dispatch(self, to: str, subject: str, html: str) -> Optional[Future]:
        """Send best-effort: any delivery failure is logged, never raised."""

        try:
            self.send(to, subject, html)
        except Exception:
            logger.exception("Failed to send %r to %s", subject, to)
        return None


class SMTPMailer(Mailer):
    """SMTP transport; each message opens its own bounded-time connection.

    Messages are handed to a small worker pool so the request that
    triggered them returns as soon as the account change is committed.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: Optional[str],
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
        workers: int = 2,
    ):
        self._host = host
        self._port = port
        self._sender = sender or username or "no-reply@localhost"
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, workers), thread_name_prefix="mailer"
        )

    @classmethod
    def from_config(cls, config) -> "SMTPMailer":
        return cls(
            host=config.get("MAIL_HOST", "localhost"),
            port=int(config.get("MAIL_PORT", 25)),
            sender=config.get("MAIL_SENDER"),
            username=config.get("MAIL_USER"),
            password=config.get("MAIL_PASSWORD"),
            use_tls=bool(config.get("MAIL_USE_TLS", True)),
            timeout=float(config.get("MAIL_TIMEOUT", 10)),
            workers=int(config.get("MAIL_WORKERS", 2)),
        )

    def _build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")
        return message

    def send(self, to: str, subject: str, html: str) -> None:
        message = self._build_message(to, subject, html)
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as conn:
            if self._use_tls:
                conn.starttls()
            if self._username and self._password:
                conn.login(self._username, self._password)
            conn.send_message(message)
        logger.info("Sent %r to %s", subject, to)

    def dispatch(self, to: str, subject: str, html: str) -> Optional[Future]:
        return self._executor.submit(super().dispatch, to, subject, html)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
