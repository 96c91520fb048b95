"""Consumption ledgers that make stateless nonces single-use."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Optional

import asyncpg

from .manager import NonceCheck, NonceManager
from .utils.hashing import sha256_hex
from .utils.time import from_epoch_seconds, utc_now

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS consumed_nonces (
    token_hash TEXT PRIMARY KEY,
    expires_at TIMESTAMPTZ NOT NULL
)
"""


class NonceLedger(ABC):
    """Abstract record of nonces that have already been redeemed."""

    @abstractmethod
    async def consume(self, token: str, expires_at: datetime) -> bool:
        """Return True the first time ``token`` is consumed, False on a live replay.

        ``expires_at`` is the first instant at which the token no longer validates.
        """

    async def close(self) -> None:
        """Close ledger resources if needed."""


class InMemoryLedger(NonceLedger):
    """Process-local ledger."""

    def __init__(self, *, clock: Callable[[], datetime] = utc_now) -> None:
        self.entries: dict[str, datetime] = {}
        self.clock = clock

    def __len__(self) -> int:
        return len(self.entries)

    def purge(self, now: Optional[datetime] = None) -> None:
        now = now or self.clock()
        expired = [k for k, exp in self.entries.items() if exp <= now]
        for key in expired:
            self.entries.pop(key, None)

    async def consume(self, token: str, expires_at: datetime) -> bool:
        self.purge()
        key = sha256_hex(token)
        if key in self.entries:
            return False
        self.entries[key] = expires_at
        return True


class PostgresLedger(NonceLedger):
    """Postgres-backed ledger using asyncpg."""

    def __init__(
        self,
        dsn: Optional[str] = None,
        *,
        pool: Optional[asyncpg.Pool] = None,
        min_size: int = 1,
        max_size: int = 4,
    ) -> None:
        self.dsn = dsn
        self.pool = pool
        self._min_size = min_size
        self._max_size = max_size

    async def connect(self) -> None:
        """Initialize a connection pool if one was not supplied."""
        if self.pool is not None:
            return
        if not self.dsn:
            raise ValueError("Either `dsn` or `pool` must be provided for PostgresLedger.")
        self.pool = await asyncpg.create_pool(dsn=self.dsn, min_size=self._min_size, max_size=self._max_size)

    async def close(self) -> None:
        if self.pool is not None:
            await self.pool.close()
            self.pool = None

    async def ensure_schema(self) -> None:
        await self.connect()
        assert self.pool is not None
        async with self.pool.acquire() as conn:
            await conn.execute(SCHEMA_SQL)

    async def consume(self, token: str, expires_at: datetime) -> bool:
        await self.connect()
        assert self.pool is not None
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute("DELETE FROM consumed_nonces WHERE expires_at <= NOW()")
                row = await conn.fetchrow(
                    """
                    INSERT INTO consumed_nonces (token_hash, expires_at)
                    VALUES ($1, $2)
                    ON CONFLICT (token_hash) DO NOTHING
                    RETURNING token_hash
                    """,
                    sha256_hex(token),
                    expires_at,
                )
                return row is not None


def create_ledger_from_env() -> NonceLedger:
    """Create Postgres ledger if env configured, otherwise in-memory."""
    dsn = os.getenv("STATELESS_NONCE_PG_DSN") or os.getenv("DATABASE_URL")
    if dsn:
        return PostgresLedger(dsn=dsn)
    return InMemoryLedger()


class SingleUseNonceGuard:
    """Validate a nonce and then record it so it cannot be redeemed twice."""

    def __init__(self, *, manager: NonceManager, ledger: NonceLedger) -> None:
        self.manager = manager
        self.ledger = ledger

    async def redeem(
        self,
        token: str,
        action: str,
        uuid: Any,
        object_id: Any,
        salt: str = "",
        pepper_length: Optional[int] = None,
    ) -> NonceCheck:
        result = self.manager.check(token, action, uuid, object_id, salt=salt, pepper_length=pepper_length)
        if not result.valid:
            return result

        assert result.expires_at is not None
        # Whole-second expiry: the token keeps validating until expires_at + 1.
        if not await self.ledger.consume(token, from_epoch_seconds(result.expires_at + 1)):
            logger.warning("Replayed nonce rejected for action=%s", action)
            return NonceCheck(valid=False, reason="replayed", expires_at=result.expires_at)
        return result
