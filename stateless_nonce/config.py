"""Configuration model for nonce issuance and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

# Width of the SHA-1 hex digest the pepper window is taken from.
MAX_PEPPER_LENGTH = 40

# Ten digits hold every epoch second up to 9999999999 (year 2286).
NONCE_TIME_LENGTH = 10


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}.") from exc


@dataclass(frozen=True)
class NonceConfig:
    """Field widths, TTL policy and hash settings shared by issuer and validator."""

    pepper_length: int = 8
    ttl_seconds: int = 3600
    time_width: int = NONCE_TIME_LENGTH
    hash_scheme: str = "pbkdf2_sha256"
    hash_rounds: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0 <= self.pepper_length <= MAX_PEPPER_LENGTH:
            raise ConfigurationError(
                f"pepper_length must be between 0 and {MAX_PEPPER_LENGTH}, got {self.pepper_length}."
            )
        if self.time_width < 1:
            raise ConfigurationError(f"time_width must be positive, got {self.time_width}.")
        if not self.hash_scheme:
            raise ConfigurationError("hash_scheme must be configured.")
        if self.hash_rounds is not None and self.hash_rounds < 1:
            raise ConfigurationError(f"hash_rounds must be positive, got {self.hash_rounds}.")

    @classmethod
    def from_env(cls) -> "NonceConfig":
        """Build a config from ``STATELESS_NONCE_*`` environment variables."""
        defaults = cls()
        return cls(
            pepper_length=_env_int("STATELESS_NONCE_PEPPER_LENGTH", defaults.pepper_length),
            ttl_seconds=_env_int("STATELESS_NONCE_TTL_SECONDS", defaults.ttl_seconds),
            time_width=_env_int("STATELESS_NONCE_TIME_LENGTH", defaults.time_width),
            hash_scheme=os.getenv("STATELESS_NONCE_HASH_SCHEME", defaults.hash_scheme).strip(),
            hash_rounds=_env_int("STATELESS_NONCE_HASH_ROUNDS", defaults.hash_rounds),
        )
