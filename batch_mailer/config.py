from __future__ import annotations

import os
from dataclasses import dataclass

# --------------------------------
# Settings

# SMTP relay (STARTTLS on the submission port)
RELAY_HOST = "smtp.gmail.com"
RELAY_PORT = 587

# Socket timeout for the relay session, in seconds
RELAY_TIMEOUT_SECONDS = 30.0

# Subject used for every outbound message
EMAIL_SUBJECT = "This is a test email"

DEFAULT_RECIPIENTS_FILE = "recipients.json"
DEFAULT_ADDRESS_FIELD = "email"
DEFAULT_BODY_FIELD = "body"
# --------------------------------


class ConfigurationError(ValueError):
    """Raised when a required environment variable is missing."""


@dataclass
class Settings:
    sender: str
    app_password: str
    recipients_file: str = DEFAULT_RECIPIENTS_FILE
    address_field: str = DEFAULT_ADDRESS_FIELD
    body_field: str = DEFAULT_BODY_FIELD

    @staticmethod
    def from_env() -> "Settings":
        # Gmail needs an App Password here, generated under
        # "2-Step Verification" > "App passwords" in the Google account.
        def require(name: str) -> str:
            value = os.getenv(name)
            if value is None or not value.strip():
                raise ConfigurationError(f"env:{name} not found")
            return value

        def optional_with_default(name: str, default: str) -> str:
            value = os.getenv(name)
            if value is None or not value.strip():
                return default
            return value.strip()

        return Settings(
            sender=require("SENDER").strip(),
            app_password=require("APP_PASSWORD"),
            recipients_file=optional_with_default("RECIPIENTS_FILE", DEFAULT_RECIPIENTS_FILE),
            address_field=optional_with_default("ADDRESS_FIELD", DEFAULT_ADDRESS_FIELD),
            body_field=optional_with_default("BODY_FIELD", DEFAULT_BODY_FIELD),
        )

    def __repr__(self) -> str:
        return (
            f"Settings(sender={self.sender!r}, app_password='***', "
            f"recipients_file={self.recipients_file!r}, "
            f"address_field={self.address_field!r}, body_field={self.body_field!r})"
        )
