from __future__ import annotations

import logging
import smtplib
import threading
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Callable, List, Optional

from core.config import AppSettings
from core.exceptions import TransportError


logger = logging.getLogger(__name__)


def build_message(
    *,
    from_name: str,
    from_email: Optional[str],
    to_email: str,
    subject: str,
    body: str,
    reply_to: Optional[str] = None,
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = f"{from_name} <{from_email}>" if from_email else from_name
    msg["To"] = to_email
    msg["Subject"] = subject
    msg["Message-ID"] = make_msgid()
    if reply_to:
        msg["Reply-To"] = reply_to
    msg.set_content(body)
    return msg


class _PooledConnection:
    def __init__(self, client: smtplib.SMTP) -> None:
        self.client = client
        self.sent = 0

    def close(self) -> None:
        try:
            self.client.quit()
        except (smtplib.SMTPException, OSError):
            self.client.close()


class SMTPTransport:
    """SMTP sender backed by a bounded pool of reusable connections.

    At most ``max_connections`` connections are open at once. Each one is
    retired after ``max_messages`` deliveries. Safe to call from several
    threads; the notification dispatcher calls it from the threadpool.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: Optional[str],
        password: Optional[str],
        *,
        use_tls: bool = True,
        timeout: float = 30.0,
        max_connections: int = 5,
        max_messages: int = 100,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.max_connections = max_connections
        self.max_messages = max_messages
        self._smtp_factory = smtp_factory
        self._slots = threading.BoundedSemaphore(max_connections)
        self._idle: List[_PooledConnection] = []
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, app_settings: AppSettings) -> "SMTPTransport":
        return cls(
            app_settings.smtp_host,
            app_settings.smtp_port,
            app_settings.smtp_username,
            app_settings.smtp_password,
            use_tls=app_settings.smtp_use_tls,
            timeout=app_settings.smtp_timeout,
            max_connections=app_settings.smtp_pool_max_connections,
            max_messages=app_settings.smtp_pool_max_messages,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.username and self.password)

    @property
    def idle_connections(self) -> int:
        with self._lock:
            return len(self._idle)

    def _open(self) -> _PooledConnection:
        try:
            client = self._smtp_factory(self.host, self.port, timeout=self.timeout)
            client.ehlo()
            if self.use_tls:
                client.starttls()
                client.ehlo()
            client.login(self.username, self.password)
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(f"Could not connect to SMTP server {self.host}:{self.port}: {exc}") from exc
        logger.info("mail.connection_opened", extra={"host": self.host, "port": self.port})
        return _PooledConnection(client)

    @staticmethod
    def _is_alive(conn: _PooledConnection) -> bool:
        # Servers drop idle sessions; a NOOP tells us before we spend a message on it
        try:
            code, _ = conn.client.noop()
        except (smtplib.SMTPException, OSError):
            return False
        return code == 250

    def _checkout(self) -> _PooledConnection:
        while True:
            with self._lock:
                if not self._idle:
                    break
                conn = self._idle.pop()
            if self._is_alive(conn):
                return conn
            logger.info("mail.connection_stale", extra={"host": self.host, "sent": conn.sent})
            conn.close()
        return self._open()

    def _checkin(self, conn: _PooledConnection) -> None:
        if conn.sent >= self.max_messages:
            logger.info("mail.connection_retired", extra={"sent": conn.sent})
            conn.close()
            return
        with self._lock:
            self._idle.append(conn)

    def send(self, message: EmailMessage) -> None:
        if not self.enabled:
            logger.info("mail.send_skipped", extra={"reason": "missing_credentials", "to": message["To"]})
            return
        with self._slots:
            conn = self._checkout()
            try:
                conn.client.send_message(message)
            except (smtplib.SMTPException, OSError) as exc:
                conn.close()
                raise TransportError(f"SMTP delivery to {message['To']} failed: {exc}") from exc
            conn.sent += 1
            self._checkin(conn)
        logger.info("mail.sent", extra={"to": message["To"], "subject": message["Subject"]})

    def close(self) -> None:
        with self._lock:
            idle, self._idle = self._idle, []
        for conn in idle:
            conn.close()
