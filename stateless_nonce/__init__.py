"""Stateless nonce package.

Issues and validates short-lived nonce tokens bound to an action, a user
identity and a target object, for protecting state-changing requests against
replay and cross-user forgery.
"""

from .config import NonceConfig
from .errors import ConfigurationError, FormatError, LengthError, NonceError
from .hashing import Hasher, PasslibHasher
from .manager import NonceCheck, NonceManager
from .render import nonce_field

__all__ = [
    "NonceConfig",
    "NonceManager",
    "NonceCheck",
    "Hasher",
    "PasslibHasher",
    "NonceError",
    "FormatError",
    "LengthError",
    "ConfigurationError",
    "nonce_field",
    "InMemoryLedger",
    "PostgresLedger",
    "SingleUseNonceGuard",
    "create_ledger_from_env",
]


def __getattr__(name: str):
    if name in {"InMemoryLedger", "PostgresLedger", "SingleUseNonceGuard", "create_ledger_from_env"}:
        from . import ledger

        return getattr(ledger, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
