"""Text normalization and digest helpers."""

from __future__ import annotations

import hashlib
from typing import Any


def as_text(value: Any) -> str:
    """Return the canonical string form used for identities and object ids."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def sha1_hex(value: str) -> str:
    """Return SHA-1 hex digest for the provided string value."""
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def sha256_hex(value: str) -> str:
    """Return SHA-256 hex digest for the provided string value."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()
