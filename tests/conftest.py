from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.exc import SQLAlchemyError

from easysql import RunnerConfig, Settings, TransactionRunner


class FakeConnection:
    """
    Records every call made on it into the owning pool's `calls` log.

    Statements listed in `pool.failing_sql` raise, as do the methods named
    in `pool.failing_methods`. Statements are staged on `pending` and only
    reach `pool.committed` through a successful commit (or immediately when
    no transaction is open).
    """

    def __init__(self, pool: "FakePool"):
        self.pool = pool
        self.pending: list[str] = []
        self.in_transaction = False
        self.released = False

    def _record(self, *call: Any) -> None:
        self.pool.calls.append(call)

    def _maybe_fail(self, method: str) -> None:
        if method in self.pool.failing_methods:
            raise SQLAlchemyError(f"{method} failed")

    async def query(self, sql: str, args: Any = None) -> list[dict[str, Any]]:
        self._record("query", sql, args)
        if sql in self.pool.failing_sql:
            raise SQLAlchemyError(f"cannot run {sql}")
        if self.in_transaction:
            self.pending.append(sql)
        else:
            self.pool.committed.append(sql)
        return [dict(row) for row in self.pool.responses.get(sql, [])]

    async def begin_transaction(self) -> None:
        self._record("begin")
        self._maybe_fail("begin")
        self.in_transaction = True

    async def commit(self) -> None:
        self._record("commit")
        self._maybe_fail("commit")
        self.pool.committed.extend(self.pending)
        self.pending = []
        self.in_transaction = False

    async def rollback(self) -> None:
        self._record("rollback")
        self.pending = []
        self.in_transaction = False
        self._maybe_fail("rollback")

    async def release(self) -> None:
        self._record("release")
        self.released = True


class FakePool:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.connections: list[FakeConnection] = []
        self.committed: list[str] = []
        self.responses: dict[str, list[dict[str, Any]]] = {}
        self.failing_sql: set[str] = set()
        self.failing_methods: set[str] = set()

    async def acquire(self) -> FakeConnection:
        self.calls.append(("acquire",))
        if "acquire" in self.failing_methods:
            raise SQLAlchemyError("pool exhausted")
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn

    async def dispose(self) -> None:
        self.calls.append(("dispose",))

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def queries(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "query"]


@pytest.fixture
def pool() -> FakePool:
    return FakePool()


@pytest.fixture
def runner(pool: FakePool) -> TransactionRunner:
    return TransactionRunner(RunnerConfig(pools={"GENERAL": pool}))


@pytest.fixture
def sqlite_settings(tmp_path: Path) -> Settings:
    """
    Settings pointing at an on-disk sqlite database under tmp_path.
    """
    return Settings(
        DB_DRIVER_NAME="sqlite+aiosqlite",
        DB_DATABASE_NAME=str(tmp_path / "test.sqlite"),
    )


@pytest_asyncio.fixture
async def sqlite_runner(sqlite_settings: Settings):
    """
    Runner owning a real sqlite pool with a small `users` table.
    """
    runner = TransactionRunner.from_settings(sqlite_settings)
    try:
        await runner.execute_query("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL UNIQUE)")
        yield runner
    finally:
        await runner.dispose()


@pytest.fixture
def pool_factory():
    return FakePool
