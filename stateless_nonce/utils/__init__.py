"""Utility helpers for identity digests and time operations."""

from .hashing import as_text, sha1_hex, sha256_hex
from .time import epoch_seconds, from_epoch_seconds, utc_now

__all__ = ["as_text", "sha1_hex", "sha256_hex", "epoch_seconds", "from_epoch_seconds", "utc_now"]
