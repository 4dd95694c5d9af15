from __future__ import annotations

import smtplib
import threading
import time
from typing import List

import pytest

from core.exceptions import TransportError
from services.mail import SMTPTransport, build_message


class FakeSMTP:
    def __init__(self, host, port, timeout=None, fail_sends: bool = False) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.fail_sends = fail_sends
        self.sent: List = []
        self.calls: List[str] = []
        self.closed = False
        self.dropped = False

    def ehlo(self):
        self.calls.append("ehlo")

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(f"login:{username}")

    def noop(self):
        if self.dropped:
            raise smtplib.SMTPServerDisconnected("Connection unexpectedly closed")
        return 250, b"OK"

    def send_message(self, message):
        if self.fail_sends or self.dropped:
            raise smtplib.SMTPServerDisconnected("Connection unexpectedly closed")
        self.sent.append(message)

    def quit(self):
        self.closed = True

    def close(self):
        self.closed = True


@pytest.fixture
def opened() -> List[FakeSMTP]:
    return []


def _transport(opened, **kwargs) -> SMTPTransport:
    fail_sends = kwargs.pop("fail_sends", False)

    def factory(host, port, timeout=None):
        conn = FakeSMTP(host, port, timeout, fail_sends=fail_sends)
        opened.append(conn)
        return conn

    return SMTPTransport(
        "smtp.gmail.com",
        587,
        "bookings@surakshacarcare.com",
        "app-password",
        smtp_factory=factory,
        **kwargs,
    )


def _message(to: str = "a@x.com"):
    return build_message(
        from_name="Suraksha Car Care",
        from_email="bookings@surakshacarcare.com",
        to_email=to,
        subject="Appointment Confirmation",
        body="See you soon",
    )


def test_build_message_headers():
    msg = build_message(
        from_name="Suraksha Car Care",
        from_email="bookings@surakshacarcare.com",
        to_email="a@x.com",
        subject="Hello",
        body="Body text",
        reply_to="owner@surakshacarcare.com",
    )

    assert msg["From"] == "Suraksha Car Care <bookings@surakshacarcare.com>"
    assert msg["To"] == "a@x.com"
    assert msg["Reply-To"] == "owner@surakshacarcare.com"
    assert msg["Message-ID"]
    assert msg.get_content().strip() == "Body text"


def test_connection_handshake_uses_starttls_and_login(opened):
    transport = _transport(opened)
    transport.send(_message())

    assert opened[0].calls == ["ehlo", "starttls", "ehlo", "login:bookings@surakshacarcare.com"]
    assert opened[0].timeout == 30.0


def test_connection_is_reused_between_messages(opened):
    transport = _transport(opened)

    for _ in range(3):
        transport.send(_message())

    assert len(opened) == 1
    assert len(opened[0].sent) == 3
    assert transport.idle_connections == 1


def test_connection_is_retired_after_max_messages(opened):
    transport = _transport(opened, max_messages=2)

    for _ in range(5):
        transport.send(_message())

    assert [len(conn.sent) for conn in opened] == [2, 2, 1]
    assert opened[0].closed and opened[1].closed
    assert not opened[2].closed


def test_failed_send_discards_connection_and_raises(opened):
    transport = _transport(opened, fail_sends=True)

    with pytest.raises(TransportError):
        transport.send(_message())

    assert opened[0].closed
    assert transport.idle_connections == 0


def test_connect_failure_raises_transport_error():
    def factory(host, port, timeout=None):
        raise ConnectionRefusedError("refused")

    transport = SMTPTransport("smtp.gmail.com", 587, "user", "secret", smtp_factory=factory)

    with pytest.raises(TransportError):
        transport.send(_message())


def test_send_is_skipped_without_credentials(opened):
    def factory(host, port, timeout=None):
        raise AssertionError("should not connect")

    transport = SMTPTransport("smtp.gmail.com", 587, None, None, smtp_factory=factory)

    transport.send(_message())

    assert not transport.enabled


def test_close_drains_idle_connections(opened):
    transport = _transport(opened)
    transport.send(_message())

    transport.close()

    assert opened[0].closed
    assert transport.idle_connections == 0


def test_from_settings_reads_pool_limits(app_settings):
    transport = SMTPTransport.from_settings(app_settings)

    assert transport.max_connections == 5
    assert transport.max_messages == 100
    assert transport.host == "smtp.gmail.com"


def test_connection_dropped_while_idle_is_replaced(opened):
    transport = _transport(opened)
    transport.send(_message("first@x.com"))
    opened[0].dropped = True

    transport.send(_message("admin@x.com"))

    assert len(opened) == 2
    assert opened[0].closed
    assert [m["To"] for m in opened[1].sent] == ["admin@x.com"]
    assert transport.idle_connections == 1


def test_pool_never_exceeds_max_connections_under_concurrency():
    max_connections = 2
    lock = threading.Lock()
    state = {"active": 0, "peak": 0}
    opened: List[FakeSMTP] = []

    class SlowSMTP(FakeSMTP):
        def send_message(self, message):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            time.sleep(0.02)
            with lock:
                state["active"] -= 1
            super().send_message(message)

    def factory(host, port, timeout=None):
        conn = SlowSMTP(host, port, timeout)
        with lock:
            opened.append(conn)
        return conn

    transport = SMTPTransport(
        "smtp.gmail.com",
        587,
        "bookings@surakshacarcare.com",
        "app-password",
        max_connections=max_connections,
        smtp_factory=factory,
    )
    senders = [threading.Thread(target=transport.send, args=(_message(f"c{i}@x.com"),)) for i in range(8)]
    for t in senders:
        t.start()
    for t in senders:
        t.join()

    assert state["peak"] <= max_connections
    assert len(opened) <= max_connections
    assert transport.idle_connections <= max_connections
    assert sum(len(conn.sent) for conn in opened) == 8
