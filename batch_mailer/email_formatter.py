from __future__ import annotations

from email.message import EmailMessage

from email_validator import EmailNotValidError, validate_email

from .config import EMAIL_SUBJECT


def parse_address(value: str) -> str:
    """
    Validate an email address and return its normalized form.

    Only the syntax is checked: single-label, intranet and special-use
    domains are accepted and no DNS lookup is made.
    Raises ValueError with the validator's explanation otherwise.
    """
    if not isinstance(value, str):
        raise ValueError(f"email address must be a string, got {type(value).__name__}")
    try:
        validated = validate_email(
            value.strip(),
            check_deliverability=False,
            globally_deliverable=False,
            test_environment=True,
        )
    except EmailNotValidError as exc:
        raise ValueError(f"{value!r} is not a valid email address ({exc})") from exc
    return validated.normalized


def build_message(sender: str, recipient: str, body: str, subject: str = EMAIL_SUBJECT) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = recipient
    message["Subject"] = subject
    message.set_content(body, subtype="plain", charset="utf-8")
    return message
