"""Timestamp parsing shared by registry clients."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def parse_iso8601(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware UTC datetime.

    Accepts the ``Z`` suffix, fractional seconds of any precision and
    offsets. Returns None for empty or unparsable values.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # fromisoformat before 3.11 only accepts 3 or 6 fractional digits
    if "." in text:
        head, _, tail = text.partition(".")
        digits = ""
        rest = tail
        while rest and rest[0].isdigit():
            digits, rest = digits + rest[0], rest[1:]
        text = f"{head}.{(digits + '000000')[:6]}{rest}"
    try:
        parsed = datetime.fromisoformat(text)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def from_epoch_ms(value: Any) -> Optional[datetime]:
    """Convert epoch milliseconds (as reported by Maven search) to a UTC datetime."""
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError):
        return None
