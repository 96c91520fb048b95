"""One-way hash adapter used to sign the nonce payload."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from passlib.context import CryptContext

from .config import NonceConfig

logger = logging.getLogger(__name__)


class Hasher(Protocol):
    """Keyed one-way hash primitive consumed by :class:`NonceManager`."""

    def hash(self, plaintext: str) -> str:
        """Return a self-describing digest of ``plaintext``."""

    def verify(self, plaintext: str, digest: str) -> bool:
        """Return True if ``digest`` was produced from ``plaintext``."""


class PasslibHasher:
    """Hasher backed by a passlib ``CryptContext``."""

    def __init__(self, scheme: str = "pbkdf2_sha256", *, rounds: Optional[int] = None) -> None:
        settings = {}
        if rounds is not None:
            settings[f"{scheme}__default_rounds"] = rounds
        self.scheme = scheme
        self._context = CryptContext(schemes=[scheme], deprecated="auto", **settings)

    @classmethod
    def from_config(cls, config: NonceConfig) -> "PasslibHasher":
        return cls(config.hash_scheme, rounds=config.hash_rounds)

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        if not digest:
            return False
        try:
            return self._context.verify(plaintext, digest)
        except (ValueError, TypeError):
            # passlib raises for digests it cannot identify or parse.
            logger.debug("Unparseable %s digest rejected", self.scheme)
            return False
