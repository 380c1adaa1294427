from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

logger = logging.getLogger(__name__)


class DataFormatError(ValueError):
    """Raised when the recipient document is unreadable or not a JSON array."""


def parse_recipients(text: str, source: str = "recipients.json") -> List[Any]:
    """
    Parse a recipient document.

    The top-level value must be a JSON array. Elements are returned untouched
    and in document order; their shape is left to the record extractor.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataFormatError(f"Failed to parse {source}: {exc}") from exc
    if not isinstance(data, list):
        raise DataFormatError(f"{source} must be a JSON array")
    return data


def load_recipients(path: str | Path) -> List[Any]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DataFormatError(f"Failed to read {path}: {exc}") from exc
    records = parse_recipients(text, source=str(path))
    logger.info("Loaded %s recipients from %s", len(records), path)
    return records
