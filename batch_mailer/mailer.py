from __future__ import annotations

import logging
import re
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional, Protocol

from .config import RELAY_PORT, RELAY_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

_HOST_LABEL = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


class TransportError(Exception):
    """Raised when the SMTP relay cannot be built or used."""


class RelayConnectionError(TransportError):
    """Raised when the relay is unreachable or rejects the session."""


class RelaySession(Protocol):
    def check_connection(self) -> None: ...

    def send(self, message: EmailMessage) -> None: ...

    def close(self) -> None: ...


def _is_valid_hostname(host: str) -> bool:
    if not host or len(host) > 253:
        return False
    labels = host.rstrip(".").split(".")
    return all(_HOST_LABEL.match(label) for label in labels)


class SmtpRelay:
    """
    One authenticated STARTTLS session to an SMTP relay.

    The session is opened by ``check_connection`` and reused for every
    ``send`` until ``close``.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        port: int = RELAY_PORT,
        timeout: float = RELAY_TIMEOUT_SECONDS,
    ):
        if not _is_valid_hostname(host):
            raise TransportError(f"Failed to create SMTP relay: invalid host {host!r}")
        if not 0 < port < 65536:
            raise TransportError(f"Failed to create SMTP relay: invalid port {port}")
        self.host = host
        self.port = port
        self._username = username
        self._password = password
        self._timeout = timeout
        self._smtp: Optional[smtplib.SMTP] = None

    def __enter__(self) -> "SmtpRelay":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def check_connection(self) -> None:
        if self._smtp is not None:
            return
        smtp = smtplib.SMTP(timeout=self._timeout)
        try:
            smtp.connect(self.host, self.port)
            smtp.ehlo()
            smtp.starttls(context=ssl.create_default_context())
            smtp.ehlo()
            smtp.login(self._username, self._password)
            code, _ = smtp.noop()
            if code != 250:
                raise smtplib.SMTPResponseException(code, b"NOOP rejected")
        except (smtplib.SMTPException, OSError) as exc:
            smtp.close()
            raise RelayConnectionError(f"Failed to connect to SMTP server: {exc}") from exc
        logger.info("Connected to SMTP relay %s:%s as %s", self.host, self.port, self._username)
        self._smtp = smtp

    def send(self, message: EmailMessage) -> None:
        if self._smtp is None:
            raise TransportError("SMTP session is not open; call check_connection() first.")
        try:
            refused = self._smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc
        if refused:
            raise TransportError(f"Recipients refused: {refused}")

    def close(self) -> None:
        if self._smtp is None:
            return
        smtp, self._smtp = self._smtp, None
        try:
            smtp.quit()
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Failed to close SMTP session cleanly: %s", exc)
            smtp.close()
