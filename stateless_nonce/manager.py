"""Nonce issuance and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from . import codec, spice
from .config import MAX_PEPPER_LENGTH, NonceConfig
from .errors import FormatError, LengthError
from .hashing import Hasher, PasslibHasher
from .pepper import derive_pepper
from .utils.hashing import as_text
from .utils.time import epoch_seconds

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


@dataclass(frozen=True)
class NonceCheck:
    """Outcome of a nonce validation."""

    valid: bool
    reason: str
    expires_at: Optional[int] = None


class NonceManager:
    """Create and validate ``pepper + digest + time + salt`` nonce tokens.

    The manager keeps no state between calls: everything is derived from the
    arguments, the configuration and the clock.
    """

    def __init__(
        self,
        config: Optional[NonceConfig] = None,
        *,
        hasher: Optional[Hasher] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config or NonceConfig()
        self.hasher = hasher or PasslibHasher.from_config(self.config)
        self.clock = clock or epoch_seconds

    @staticmethod
    def signed_payload(action: str, uuid: Any, object_id: Any) -> str:
        """Return the plaintext covered by the digest."""
        return f"{action}{as_text(uuid)}{as_text(object_id)}"

    def create(
        self,
        action: str,
        uuid: Any,
        object_id: Any,
        ttl_seconds: Optional[int] = None,
        salt: str = "",
        pepper_length: Optional[int] = None,
    ) -> str:
        """Issue a nonce for ``action`` by ``uuid`` on ``object_id``.

        Raises :class:`FormatError` if the expiry does not fit the configured
        time field.
        """
        ttl = self.config.ttl_seconds if ttl_seconds is None else ttl_seconds
        length = self._pepper_length(pepper_length)

        expires_at = self.clock() + ttl
        encoded_time = codec.encode_time(expires_at, self.config.time_width)
        digest = self.hasher.hash(self.signed_payload(action, uuid, object_id))

        logger.debug("Issued nonce for action=%s expires_at=%d", action, expires_at)
        return derive_pepper(uuid, length) + digest + encoded_time + salt

    def check(
        self,
        token: str,
        action: str,
        uuid: Any,
        object_id: Any,
        ttl_seconds: Optional[int] = None,
        salt: str = "",
        pepper_length: Optional[int] = None,
    ) -> NonceCheck:
        """Validate ``token`` and report why it was rejected.

        ``ttl_seconds`` is accepted so callers can pass the same arguments as
        to :meth:`create`; the expiry embedded in the token is authoritative.
        """
        length = self._pepper_length(pepper_length)
        width = self.config.time_width

        if not isinstance(token, str) or not spice.check_spice(token, uuid, salt, length):
            return self._reject("bad_spice", action)

        stripped = spice.unspice(token, uuid, salt, length)
        time_start = len(stripped) - width
        if time_start < 0:
            return self._reject("truncated", action)

        digest = stripped[:time_start]
        try:
            expires_at = codec.decode_time(stripped[time_start:], width)
        except (FormatError, LengthError):
            return self._reject("bad_time", action)

        if not self.hasher.verify(self.signed_payload(action, uuid, object_id), digest):
            return self._reject("bad_digest", action, expires_at)

        if self.clock() > expires_at:
            return self._reject("expired", action, expires_at)

        return NonceCheck(valid=True, reason="ok", expires_at=expires_at)

    def validate(
        self,
        token: str,
        action: str,
        uuid: Any,
        object_id: Any,
        ttl_seconds: Optional[int] = None,
        salt: str = "",
        pepper_length: Optional[int] = None,
    ) -> bool:
        """Return True if ``token`` is a live nonce for the given binding."""
        return self.check(token, action, uuid, object_id, ttl_seconds, salt, pepper_length).valid

    def _pepper_length(self, pepper_length: Optional[int]) -> int:
        length = self.config.pepper_length if pepper_length is None else pepper_length
        if not 0 <= length <= MAX_PEPPER_LENGTH:
            raise ValueError(f"Pepper length must be between 0 and {MAX_PEPPER_LENGTH}, got {length}.")
        return length

    @staticmethod
    def _reject(reason: str, action: str, expires_at: Optional[int] = None) -> NonceCheck:
        logger.debug("Rejected nonce for action=%s: %s", action, reason)
        return NonceCheck(valid=False, reason=reason, expires_at=expires_at)
