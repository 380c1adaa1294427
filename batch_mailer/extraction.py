from __future__ import annotations

from typing import Any, Protocol


class ExtractionError(Exception):
    """Raised when a recipient record does not yield the requested value."""


class RecordExtractor(Protocol):
    """
    Turns one opaque recipient record into an address and a body.

    The batch sender makes no assumption about record shape; integrators
    plug in their own implementation.
    """

    def extract_address(self, record: Any) -> str: ...

    def extract_body(self, record: Any) -> str: ...


class FieldExtractor:
    """Reads the address and the body from named keys of a JSON object."""

    def __init__(self, address_field: str, body_field: str):
        if not address_field or not body_field:
            raise ValueError("address_field and body_field must be provided.")
        self._address_field = address_field
        self._body_field = body_field

    def extract_address(self, record: Any) -> str:
        return self._read(record, self._address_field)

    def extract_body(self, record: Any) -> str:
        return self._read(record, self._body_field)

    @staticmethod
    def _read(record: Any, field: str) -> str:
        if not isinstance(record, dict):
            raise ExtractionError(f"Recipient record must be a JSON object, got {type(record).__name__}")
        if field not in record:
            raise ExtractionError(f"Recipient record has no '{field}' field")
        value = record[field]
        if not isinstance(value, str):
            raise ExtractionError(f"Field '{field}' must be a string, got {type(value).__name__}")
        return value
