import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import pytest

from stateless_nonce.config import NonceConfig
from stateless_nonce.ledger import InMemoryLedger, PostgresLedger, SingleUseNonceGuard, create_ledger_from_env
from stateless_nonce.manager import NonceManager
from stateless_nonce.utils.hashing import sha256_hex


def test_in_memory_ledger_consumes_once() -> None:
    async def run() -> None:
        ledger = InMemoryLedger()
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=5)
        assert await ledger.consume("token-1", expires_at) is True
        assert await ledger.consume("token-1", expires_at) is False
        assert await ledger.consume("token-2", expires_at) is True
        assert "token-1" not in ledger.entries

    asyncio.run(run())


def test_in_memory_ledger_purges_expired_entries() -> None:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    ledger = InMemoryLedger(clock=lambda: now)

    async def run() -> None:
        assert await ledger.consume("old", now) is True
        assert await ledger.consume("live", now + timedelta(microseconds=1)) is True
        assert await ledger.consume("live", now + timedelta(microseconds=1)) is False
        assert len(ledger) == 1

    asyncio.run(run())


def test_guard_rejects_replayed_nonce() -> None:
    async def run() -> None:
        manager = NonceManager(NonceConfig(hash_rounds=1000))
        guard = SingleUseNonceGuard(manager=manager, ledger=InMemoryLedger())
        token = manager.create("edit", 42, 7, 3600, "xyz", 6)

        first = await guard.redeem(token, "edit", 42, 7, salt="xyz", pepper_length=6)
        second = await guard.redeem(token, "edit", 42, 7, salt="xyz", pepper_length=6)

        assert first.valid is True
        assert second.valid is False
        assert second.reason == "replayed"
        # Stateless validation is unaffected by consumption.
        assert manager.validate(token, "edit", 42, 7, 3600, "xyz", 6) is True

    asyncio.run(run())


def test_guard_does_not_consume_invalid_nonce() -> None:
    async def run() -> None:
        manager = NonceManager(NonceConfig(hash_rounds=1000))
        ledger = InMemoryLedger()
        guard = SingleUseNonceGuard(manager=manager, ledger=ledger)
        token = manager.create("edit", 42, 7, 3600, "xyz", 6)

        result = await guard.redeem(token, "edit", 43, 7, salt="xyz", pepper_length=6)
        assert result.valid is False
        assert result.reason == "bad_spice"
        assert len(ledger) == 0

    asyncio.run(run())


def test_create_ledger_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STATELESS_NONCE_PG_DSN", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert isinstance(create_ledger_from_env(), InMemoryLedger)

    monkeypatch.setenv("STATELESS_NONCE_PG_DSN", "postgresql://localhost/nonces")
    ledger = create_ledger_from_env()
    assert isinstance(ledger, PostgresLedger)
    assert ledger.dsn == "postgresql://localhost/nonces"


def test_postgres_ledger_requires_dsn_or_pool() -> None:
    with pytest.raises(ValueError):
        asyncio.run(PostgresLedger().connect())


def test_guard_rejects_replay_within_final_expiry_second() -> None:
    issued = {"now": 1000}
    manager = NonceManager(NonceConfig(hash_rounds=1000), clock=lambda: issued["now"])
    ledger = InMemoryLedger(clock=lambda: datetime.fromtimestamp(1100.5, tz=timezone.utc))
    guard = SingleUseNonceGuard(manager=manager, ledger=ledger)
    token = manager.create("edit", 42, 7, 100, "xyz", 6)
    issued["now"] = 1100

    async def run() -> None:
        first = await guard.redeem(token, "edit", 42, 7, salt="xyz", pepper_length=6)
        second = await guard.redeem(token, "edit", 42, 7, salt="xyz", pepper_length=6)
        assert first.valid is True
        assert second.reason == "replayed"
        assert ledger.entries[sha256_hex(token)] == datetime.fromtimestamp(1101, tz=timezone.utc)

    asyncio.run(run())


class FakeConnection:
    def __init__(self) -> None:
        self.statements: list[str] = []
        self.rows: dict[str, datetime] = {}

    async def execute(self, sql: str, *args: object) -> str:
        self.statements.append(" ".join(sql.split()))
        return "OK"

    async def fetchrow(self, sql: str, token_hash: str, expires_at: datetime) -> dict | None:
        self.statements.append(" ".join(sql.split()))
        if token_hash in self.rows:
            return None
        self.rows[token_hash] = expires_at
        return {"token_hash": token_hash}

    @asynccontextmanager
    async def transaction(self):
        yield


class FakePool:
    def __init__(self) -> None:
        self.conn = FakeConnection()
        self.closed = False

    @asynccontextmanager
    async def acquire(self):
        yield self.conn

    async def close(self) -> None:
        self.closed = True


def test_postgres_ledger_consume_maps_conflicts_to_replay() -> None:
    pool = FakePool()
    ledger = PostgresLedger(pool=pool)
    expires_at = datetime(2026, 1, 1, tzinfo=timezone.utc)

    async def run() -> None:
        await ledger.ensure_schema()
        assert await ledger.consume("token-1", expires_at) is True
        assert await ledger.consume("token-1", expires_at) is False
        assert await ledger.consume("token-2", expires_at) is True
        await ledger.close()

    asyncio.run(run())

    statements = pool.conn.statements
    assert statements[0].startswith("CREATE TABLE IF NOT EXISTS consumed_nonces")
    assert statements[1] == "DELETE FROM consumed_nonces WHERE expires_at <= NOW()"
    assert statements[2].startswith("INSERT INTO consumed_nonces (token_hash, expires_at)")
    assert "ON CONFLICT (token_hash) DO NOTHING RETURNING token_hash" in statements[2]
    assert pool.conn.rows == {sha256_hex("token-1"): expires_at, sha256_hex("token-2"): expires_at}
    assert pool.closed is True
    assert ledger.pool is None
