"""UTC time helpers."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def epoch_seconds() -> int:
    """Return the current UTC time as whole epoch seconds."""
    return int(utc_now().timestamp())


def from_epoch_seconds(value: int) -> datetime:
    """Return a timezone-aware UTC datetime for epoch seconds."""
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
