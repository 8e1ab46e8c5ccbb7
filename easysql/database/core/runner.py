"""
Transaction Runner
==================

Thin async wrapper over pooled database connections. It selects a named pool,
borrows one connection per call, runs either a single query or a list of
queries inside one transaction, and always hands the connection back.

Every failure is raised as an `EasySqlError` subclass annotated with
breadcrumb frames (see `easysql.database.helpers.errors`).

Example
-------
>>> runner = TransactionRunner(RunnerConfig(pools={"GENERAL": pool}))
>>> rows = await runner.execute_query("SELECT * FROM users WHERE id = ?", [1], suffix=" LIMIT 1")
>>> results = await runner.execute_transaction([
...     {"sql": "UPDATE accounts SET balance = balance - ? WHERE id = ?", "args": [10, 1]},
...     {"sql": "UPDATE accounts SET balance = balance + ? WHERE id = ?", "args": [10, 2]},
... ])
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import pydantic
from sqlalchemy.exc import SQLAlchemyError

from easysql.api.models import QueryRequest, QueryResult, TransactionResult
from easysql.database.config.config import RunnerConfig, Settings, TRANSACTION_QUERY_COUNT_THRESHOLD
from easysql.database.config.connection_engine import create_pool_registry
from easysql.database.helpers.errors import ConfigError, EasySqlError, ValidationError, driver_error
from easysql.database.helpers.pool import BindArgs, Connection, ConnectionPool, Rows

logger = logging.getLogger(__name__)

COMPONENT = "TransactionRunner"

LENGTH_CONSTRAINT_SQL = "SET SESSION group_concat_max_len = {max_len}"

DRIVER_EXCEPTIONS = (SQLAlchemyError, OSError)
"""Exceptions treated as driver failures and wrapped into `DriverError`."""


class TransactionRunner:
    """
    Runs single queries and all-or-nothing transactions against named pools.

    Parameters
    ----------
    config : RunnerConfig
        Pool registry and defaults. The registry must not be empty.

    Raises
    ------
    ConfigError
        If no pools are configured.
    """

    def __init__(self, config: RunnerConfig):
        if not config.pools:
            raise ConfigError("Invalid configs for easysql instantiation").annotate(COMPONENT, "__init__", "No connection pools configured")
        self.config = config
        self._owned_pools: List[Any] = []

    @classmethod
    def from_settings(cls, settings: Settings, pools: Optional[Mapping[str, ConnectionPool]] = None) -> "TransactionRunner":
        """
        Build a runner from `Settings`.

        When `pools` is given it is used as the registry. Otherwise a single
        pool is created from the database settings and registered under
        `settings.DEFAULT_POOL_NAME`; that pool is owned by the runner and
        closed by :meth:`dispose`.
        """
        owned = not pools
        if owned:
            try:
                pools = create_pool_registry(settings)
            except EasySqlError as err:
                raise err.annotate(COMPONENT, "from_settings", "Could not build the default pool")

        runner = cls(RunnerConfig(
            pools=dict(pools),
            default_pool=settings.DEFAULT_POOL_NAME,
            query_count_threshold=settings.QUERY_COUNT_THRESHOLD,
            group_concat_max_len=settings.GROUP_CONCAT_MAX_LEN,
        ))
        if owned:
            runner._owned_pools = list(pools.values())
        return runner

    async def dispose(self) -> None:
        """Dispose the pools this runner created itself."""
        for pool in self._owned_pools:
            await pool.dispose()
        self._owned_pools = []

    # -- public API ------------------------------------------------------------

    async def execute_query(
        self,
        sql: Optional[str],
        args: BindArgs = None,
        *,
        pool_name: Optional[str] = None,
        suffix: Optional[str] = None,
        length_constraint: bool = False,
    ) -> Rows:
        """
        Run one query on a connection borrowed from `pool_name`.

        Parameters
        ----------
        sql : str
            Query text. Must not be empty.
        args : sequence | mapping, optional
            Bind values for the query.
        pool_name : str, optional
            Registry key of the pool; the default pool when omitted.
        suffix : str, optional
            Text appended verbatim to `sql` (e.g. ``" LIMIT 1"``).
        length_constraint : bool
            Issue ``SET SESSION group_concat_max_len`` before the query.

        Returns
        -------
        Rows
            Rows returned by the query (empty for statements without rows).

        Raises
        ------
        ConfigError
            Unknown pool name.
        ValidationError
            Missing or empty `sql`.
        DriverError
            Acquire, session setting or query failure.
        """
        try:
            pool = self._resolve_pool(pool_name)
            request = self._construct_query(sql, args, suffix)
        except EasySqlError as err:
            raise err.annotate(COMPONENT, "execute_query", "Invalid arguments received")

        conn = await self._acquire(pool, "execute_query")
        try:
            if length_constraint:
                statement = LENGTH_CONSTRAINT_SQL.format(max_len=self.config.group_concat_max_len)
                try:
                    await conn.query(statement)
                except DRIVER_EXCEPTIONS as exc:
                    raise driver_error(exc, "Error setting group_concat_max_len").annotate(
                        COMPONENT, "execute_query", f"[SQL]Error setting group_concat_max_len to {self.config.group_concat_max_len}"
                    ) from exc

            try:
                rows = await conn.query(request.final_sql, request.args)
            except DRIVER_EXCEPTIONS as exc:
                raise driver_error(exc, "Error executing query").annotate(
                    COMPONENT, "execute_query", "Query syntax issue or processing issue"
                ) from exc
        finally:
            await self._release(conn)

        return rows

    async def execute_transaction(
        self,
        queries: Sequence[Union[QueryRequest, Mapping[str, Any]]],
        *,
        pool_name: Optional[str] = None,
        max_queries: Optional[int] = None,
    ) -> TransactionResult:
        """
        Run `queries` in order inside one transaction on one connection.

        Either every query's effects are committed, or none are: the first
        failing query (or a failed commit) triggers a rollback and later
        queries never run.

        Parameters
        ----------
        queries : sequence of QueryRequest | dict
            Queries in submission order.
        pool_name : str, optional
            Registry key of the pool; the default pool when omitted.
        max_queries : int, optional
            Overrides the instance and system query-count threshold.

        Returns
        -------
        TransactionResult
            One `QueryResult` per query, in submission order.

        Raises
        ------
        ValidationError
            Empty query list, threshold exceeded, or malformed query (with `index`).
        ConfigError
            Unknown pool name.
        DriverError
            Acquire, begin, query (with `index`) or commit failure.
        """
        operation = "execute_transaction"
        try:
            if not queries:
                raise ValidationError("Queries parameter is undefined").annotate(COMPONENT, operation, f"Queries: {queries!r}")
            pool = self._resolve_pool(pool_name)
            threshold = self._resolve_threshold(max_queries)
            if len(queries) > threshold:
                raise ValidationError("Query count exceeds threshold").annotate(
                    COMPONENT, operation, f"Query count {len(queries)} exceeds threshold {threshold}"
                )
        except EasySqlError as err:
            raise err.annotate(COMPONENT, operation, "Invalid arguments received")

        conn = await self._acquire(pool, operation)
        try:
            try:
                await conn.begin_transaction()
            except DRIVER_EXCEPTIONS as exc:
                raise driver_error(exc, "Error starting transaction").annotate(
                    COMPONENT, operation, "[SQL]Error starting transaction"
                ) from exc

            try:
                results = await self._run_queries(conn, queries)
                await self._commit(conn)
            except EasySqlError as err:
                raise err.annotate(COMPONENT, operation, "[SQL]Failed to complete transaction")
        finally:
            await self._release(conn)

        logger.debug("Transaction of %d queries committed", len(results))
        return results

    # -- internals -------------------------------------------------------------

    def _resolve_pool(self, pool_name: Optional[str]) -> ConnectionPool:
        name = pool_name or self.config.default_pool
        pool = self.config.pools.get(name)
        if pool is None:
            raise ConfigError("Invalid pool name").annotate(COMPONENT, "_resolve_pool", f"Pool: {name}")
        return pool

    def _resolve_threshold(self, max_queries: Optional[int]) -> int:
        if max_queries is not None:
            if isinstance(max_queries, bool) or not isinstance(max_queries, int) or max_queries < 1:
                raise ValidationError("Query count threshold must be a positive integer").annotate(
                    COMPONENT, "_resolve_threshold", f"max_queries: {max_queries}"
                )
            return max_queries
        if self.config.query_count_threshold is not None:
            return self.config.query_count_threshold
        return TRANSACTION_QUERY_COUNT_THRESHOLD

    @staticmethod
    def _construct_query(sql: Optional[str], args: BindArgs, suffix: Optional[str]) -> QueryRequest:
        if not sql:
            raise ValidationError("Query is undefined").annotate(COMPONENT, "_construct_query", "Query is undefined")
        try:
            return QueryRequest(sql=sql, args=args, suffix=suffix)
        except pydantic.ValidationError as exc:
            raise ValidationError("Invalid query arguments").annotate(COMPONENT, "_construct_query", str(exc)) from exc

    @staticmethod
    def _coerce_query(raw: Any, index: int) -> QueryRequest:
        if isinstance(raw, QueryRequest):
            request = raw
        else:
            try:
                request = QueryRequest.model_validate(raw)
            except pydantic.ValidationError as exc:
                raise ValidationError(f"Invalid query detected for iteration:{index}", index=index).annotate(
                    COMPONENT, "_run_queries", f"Malformed query at iteration:{index}"
                ) from exc

        if not request.sql:
            raise ValidationError(f"Invalid query detected for iteration:{index}", index=index).annotate(
                COMPONENT, "_run_queries", f"Invalid query detected for iteration:{index}"
            )
        return request

    async def _run_queries(self, conn: Connection, queries: Iterable[Any]) -> TransactionResult:
        """Execute queries one by one; roll back and stop at the first failure."""
        results: TransactionResult = []
        for index, raw in enumerate(queries):
            try:
                request = self._coerce_query(raw, index)
            except EasySqlError:
                await self._rollback(conn)
                raise

            try:
                rows = await conn.query(request.final_sql, request.args)
            except DRIVER_EXCEPTIONS as exc:
                await self._rollback(conn)
                raise driver_error(exc, f"Error executing query at iteration:{index}", index=index).annotate(
                    COMPONENT, "_run_queries", "[SQL]Error executing query"
                ) from exc

            results.append(QueryResult(rows=rows))
        return results

    async def _commit(self, conn: Connection) -> None:
        try:
            await conn.commit()
        except DRIVER_EXCEPTIONS as exc:
            await self._rollback(conn)
            raise driver_error(exc, "Error committing transaction").annotate(
                COMPONENT, "_commit", "Commit failed, transaction rolled back"
            ) from exc

    async def _acquire(self, pool: ConnectionPool, operation: str) -> Connection:
        try:
            conn = await pool.acquire()
        except DRIVER_EXCEPTIONS as exc:
            raise driver_error(exc, "Error getting connection from pool").annotate(
                COMPONENT, operation, "[SQL]Error getting connection from pool"
            ) from exc
        logger.debug("Connection acquired for %s", operation)
        return conn

    @staticmethod
    async def _rollback(conn: Connection) -> None:
        # A failing rollback must not hide the error that caused it.
        try:
            await conn.rollback()
            logger.warning("Transaction rolled back")
        except DRIVER_EXCEPTIONS:
            logger.exception("Rollback failed")

    @staticmethod
    async def _release(conn: Connection) -> None:
        try:
            await conn.release()
            logger.debug("Connection released")
        except DRIVER_EXCEPTIONS:
            logger.exception("Releasing connection failed")
