"""
Connection Pool Port and SQLAlchemy Adapter
===========================================

The runner talks to the database only through two small protocols:

- ``ConnectionPool.acquire()`` borrows a :class:`Connection`.
- ``Connection`` exposes ``query``, ``begin_transaction``, ``commit``,
  ``rollback`` and ``release``.

:class:`EnginePool` implements the port on top of a SQLAlchemy
``AsyncEngine``. The engine owns the actual pool; acquiring is
``engine.connect()`` and releasing is ``AsyncConnection.close()``, which
hands the DBAPI connection back to the pool.

Bind values
~~~~~~~~~~~
- Sequence args are passed positionally through ``exec_driver_sql`` and use the
  driver's paramstyle (``?`` for sqlite, ``%s`` for MySQL).
- Mapping args are passed through ``sqlalchemy.text`` and use ``:name`` binds.
- Without args the statement runs with ``no_parameters=True``, i.e. as a bare
  ``cursor.execute(sql)``; literal ``%`` (``DATE_FORMAT``, ``LIKE 'a%'``) is
  never treated as a format placeholder.

Autocommit
~~~~~~~~~~
Outside an explicit transaction every statement is committed right after it
runs, matching the behaviour of a plain pooled MySQL client.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncTransaction

logger = logging.getLogger(__name__)

Rows = List[Dict[str, Any]]
"""Rows returned by a query: one dict per row, keyed by column name."""

BindArgs = Union[Sequence[Any], Mapping[str, Any], None]


class Connection(Protocol):
    """A borrowed database connection."""

    async def query(self, sql: str, args: BindArgs = None) -> Rows:
        ...

    async def begin_transaction(self) -> None:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...

    async def release(self) -> None:
        ...


class ConnectionPool(Protocol):
    """A managed set of reusable connections."""

    async def acquire(self) -> Connection:
        ...


class EngineConnection:
    """
    :class:`Connection` backed by a SQLAlchemy ``AsyncConnection``.

    Parameters
    ----------
    conn : AsyncConnection
        Connection checked out from the engine's pool.
    """

    def __init__(self, conn: AsyncConnection):
        self._conn = conn
        self._transaction: Optional[AsyncTransaction] = None

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    async def query(self, sql: str, args: BindArgs = None) -> Rows:
        """
        Execute one statement and return its rows.

        Statements that produce no result rows (DDL, INSERT, UPDATE, SET ...)
        return an empty list.
        """
        if isinstance(args, Mapping) and args:
            result = await self._conn.execute(text(sql), dict(args))
        elif args:
            result = await self._conn.exec_driver_sql(sql, tuple(args))
        else:
            # bare cursor.execute(sql)
            result = await self._conn.exec_driver_sql(sql, execution_options={"no_parameters": True})

        rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []

        if self._transaction is None:
            await self._conn.commit()
        return rows

    async def begin_transaction(self) -> None:
        self._transaction = await self._conn.begin()

    async def commit(self) -> None:
        await self._conn.commit()
        self._transaction = None

    async def rollback(self) -> None:
        await self._conn.rollback()
        self._transaction = None

    async def release(self) -> None:
        # Return the connection to the pool.
        await self._conn.close()


class EnginePool:
    """
    :class:`ConnectionPool` backed by a SQLAlchemy ``AsyncEngine``.

    Parameters
    ----------
    engine : AsyncEngine
        Engine whose pool connections are borrowed from.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def acquire(self) -> EngineConnection:
        conn = await self.engine.connect()
        logger.debug("Acquired connection from pool %s", self.engine.url.render_as_string(hide_password=True))
        return EngineConnection(conn)

    async def dispose(self) -> None:
        """Close every pooled connection held by the engine."""
        await self.engine.dispose()
