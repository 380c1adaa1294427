from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class RecipientError(Exception):
    """A failure confined to a single recipient; the batch continues."""

    kind = "recipient"

    def __init__(self, index: int, message: str):
        super().__init__(message)
        self.index = index
        self.message = message

    def __str__(self) -> str:
        return f"recipient #{self.index + 1}: {self.message}"


class AddressError(RecipientError):
    kind = "address"


class MessageBuildError(RecipientError):
    kind = "message"


class SendError(RecipientError):
    kind = "send"


@dataclass
class DeliveryResult:
    index: int
    status: str  # "sent" | "failed"
    address: Optional[str] = None
    error: Optional[RecipientError] = None

    def is_success(self) -> bool:
        return self.status == "sent"


@dataclass
class BatchReport:
    results: List[DeliveryResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def sent(self) -> List[DeliveryResult]:
        return [r for r in self.results if r.is_success()]

    @property
    def errors(self) -> List[RecipientError]:
        return [r.error for r in self.results if not r.is_success() and r.error is not None]

    def is_success(self) -> bool:
        return all(r.is_success() for r in self.results)
