"""Send one plaintext email per record of a JSON recipient list over SMTP."""

__all__ = [
    "config",
    "models",
    "recipients",
    "extraction",
    "email_formatter",
    "mailer",
    "cli",
    "orchestrator",
]
