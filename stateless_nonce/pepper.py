"""Per-identity pepper derivation."""

from __future__ import annotations

from typing import Any

from .config import MAX_PEPPER_LENGTH
from .utils.hashing import as_text, sha1_hex


def derive_pepper(identity: Any, length: int) -> str:
    """Return the trailing ``length`` characters of the identity's SHA-1 hex digest.

    The pepper binds a token to a user; it is a stable tag, not a secret.
    """
    if not 0 <= length <= MAX_PEPPER_LENGTH:
        raise ValueError(f"Pepper length must be between 0 and {MAX_PEPPER_LENGTH}, got {length}.")
    if length == 0:
        return ""
    return sha1_hex(as_text(identity))[-length:]
