"""Salt and pepper framing around a nonce payload.

A spiced value is ``pepper + payload + salt``. The salt is a caller supplied
suffix; the pepper is a prefix derived from the user identity.
"""

from __future__ import annotations

import hmac
from typing import Any

from .pepper import derive_pepper


def _same(left: str, right: str) -> bool:
    return hmac.compare_digest(left.encode("utf-8", "surrogatepass"), right.encode("utf-8", "surrogatepass"))


def salt(payload: str, salt_value: str) -> str:
    """Append ``salt_value`` to ``payload``."""
    return payload + salt_value


def pepper(payload: str, identity: Any, length: int) -> str:
    """Prepend the identity's pepper to ``payload``."""
    return derive_pepper(identity, length) + payload


def spice(payload: str, identity: Any, salt_value: str, length: int) -> str:
    """Return ``pepper + payload + salt``."""
    return pepper(salt(payload, salt_value), identity, length)


def check_salt(value: str, salt_value: str) -> bool:
    """Return True if ``value`` ends with exactly ``salt_value``."""
    if len(value) < len(salt_value):
        return False
    return _same(value[len(value) - len(salt_value) :], salt_value)


def check_pepper(value: str, identity: Any, length: int) -> bool:
    """Return True if ``value`` starts with the identity's pepper."""
    if len(value) < length:
        return False
    return _same(value[:length], derive_pepper(identity, length))


def check_spice(value: str, identity: Any, salt_value: str, length: int) -> bool:
    """Return True if both the salt suffix and the pepper prefix are present."""
    return check_salt(value, salt_value) and check_pepper(value, identity, length)


def unsalt(value: str, salt_value: str) -> str:
    """Drop the trailing ``len(salt_value)`` characters of ``value``."""
    return value[: max(len(value) - len(salt_value), 0)]


def unpepper(value: str, identity: Any, length: int) -> str:
    """Drop the pepper prefix if present, otherwise return ``value`` unchanged."""
    if check_pepper(value, identity, length):
        return value[length:]
    return value


def unspice(value: str, identity: Any, salt_value: str, length: int) -> str:
    """Strip pepper then salt from ``value``."""
    return unsalt(unpepper(value, identity, length), salt_value)
