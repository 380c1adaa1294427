from __future__ import annotations

import smtplib
from typing import Any, List

import pytest

from batch_mailer import mailer as mailer_module
from batch_mailer.email_formatter import build_message
from batch_mailer.mailer import RelayConnectionError, SmtpRelay, TransportError


class FakeSMTP:
    instances: List["FakeSMTP"] = []

    def __init__(self, timeout=None):
        self.timeout = timeout
        self.calls: List[Any] = []
        self.sent: List[Any] = []
        self.fail_on: str | None = None
        self.refused: dict = {}
        FakeSMTP.instances.append(self)

    def _call(self, name, *args):
        self.calls.append((name, *args))
        if self.fail_on == name:
            raise smtplib.SMTPException(f"{name} failed")

    def connect(self, host, port):
        self._call("connect", host, port)
        return 220, b"ready"

    def ehlo(self):
        self._call("ehlo")
        return 250, b"ok"

    def starttls(self, context=None):
        self._call("starttls")
        return 220, b"go ahead"

    def login(self, user, password):
        self._call("login", user, password)
        return 235, b"accepted"

    def noop(self):
        self._call("noop")
        return 250, b"ok"

    def send_message(self, message):
        self._call("send_message")
        self.sent.append(message)
        return self.refused

    def quit(self):
        self._call("quit")

    def close(self):
        self.calls.append(("close",))


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def _message():
    return build_message("from@example.com", "to@example.com", "hi")


@pytest.mark.parametrize("host", ["", "smtp gmail.com", "-bad.example.com", "smtp..gmail.com"])
def test_construction_fails_for_malformed_host(host):
    with pytest.raises(TransportError) as excinfo:
        SmtpRelay(host, "user", "secret")
    assert "Failed to create SMTP relay" in str(excinfo.value)
    assert not isinstance(excinfo.value, RelayConnectionError)


def test_construction_fails_for_invalid_port():
    with pytest.raises(TransportError):
        SmtpRelay("smtp.gmail.com", "user", "secret", port=0)


def test_construction_does_not_touch_the_network(fake_smtp):
    SmtpRelay("smtp.gmail.com", "user", "secret")
    assert fake_smtp.instances == []


def test_check_connection_upgrades_and_authenticates(fake_smtp):
    relay = SmtpRelay("smtp.gmail.com", "user@example.com", "secret", timeout=5.0)
    relay.check_connection()

    smtp = fake_smtp.instances[0]
    assert smtp.timeout == 5.0
    assert [c[0] for c in smtp.calls] == ["connect", "ehlo", "starttls", "ehlo", "login", "noop"]
    assert smtp.calls[0] == ("connect", "smtp.gmail.com", 587)
    assert smtp.calls[4] == ("login", "user@example.com", "secret")


def test_check_connection_failure_raises_connection_error(fake_smtp, monkeypatch):
    def failing_smtp(timeout=None):
        smtp = FakeSMTP(timeout)
        smtp.fail_on = "login"
        return smtp

    monkeypatch.setattr(mailer_module.smtplib, "SMTP", failing_smtp)
    relay = SmtpRelay("smtp.gmail.com", "user", "wrong")

    with pytest.raises(RelayConnectionError) as excinfo:
        relay.check_connection()

    assert "Failed to connect to SMTP server" in str(excinfo.value)
    assert ("close",) in fake_smtp.instances[0].calls


def test_session_is_reused_for_every_send(fake_smtp):
    with SmtpRelay("smtp.gmail.com", "user", "secret") as relay:
        relay.check_connection()
        relay.send(_message())
        relay.send(_message())

    assert len(fake_smtp.instances) == 1
    smtp = fake_smtp.instances[0]
    assert len(smtp.sent) == 2
    assert smtp.calls[-1] == ("quit",)


def test_send_without_open_session_raises():
    relay = SmtpRelay("smtp.gmail.com", "user", "secret")
    with pytest.raises(TransportError):
        relay.send(_message())


def test_send_wraps_transport_failure(fake_smtp):
    relay = SmtpRelay("smtp.gmail.com", "user", "secret")
    relay.check_connection()
    fake_smtp.instances[0].fail_on = "send_message"

    with pytest.raises(TransportError) as excinfo:
        relay.send(_message())

    assert "send_message failed" in str(excinfo.value)


def test_send_reports_refused_recipients(fake_smtp):
    relay = SmtpRelay("smtp.gmail.com", "user", "secret")
    relay.check_connection()
    fake_smtp.instances[0].refused = {"to@example.com": (550, b"no such user")}

    with pytest.raises(TransportError) as excinfo:
        relay.send(_message())

    assert "Recipients refused" in str(excinfo.value)


def test_close_is_idempotent(fake_smtp):
    relay = SmtpRelay("smtp.gmail.com", "user", "secret")
    relay.check_connection()
    relay.close()
    relay.close()

    assert [c for c in fake_smtp.instances[0].calls if c[0] == "quit"] == [("quit",)]
