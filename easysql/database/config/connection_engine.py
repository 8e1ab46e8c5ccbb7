"""
Connection Engine (SQLAlchemy asyncio)

Purpose
-------
Builds connection pools from environment-backed settings:
- Builds a secure SQLAlchemy connection URL from `Settings`.
- Creates an `AsyncEngine` (connection pool + SQL execution entry point).
- Wraps the engine in an `EnginePool`, the pool handle the runner expects.

Notes
-----
- Uses `URL.create(...)` to avoid hardcoding credentials and to keep configuration
  environment-driven (e.g., via `.env`, container secrets, or deployment vars).
- Pool sizing is only passed to backends that use a queue pool; sqlite engines
  keep SQLAlchemy's own pool choice.
"""

from typing import Dict

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import create_async_engine

from easysql.database.config.config import Settings
from easysql.database.helpers.errors import ConfigError
from easysql.database.helpers.pool import EnginePool


def build_connection_url(settings: Settings) -> URL:
    """
    Construct the SQLAlchemy connection URL from `settings`.

    Raises
    ------
    ConfigError
        If no database name is configured.
    """
    if not settings.DB_DATABASE_NAME:
        raise ConfigError("Invalid configs for easysql instantiation").annotate(
            "connection_engine", "build_connection_url", "DB_DATABASE_NAME is not set"
        )

    return URL.create(
        drivername=settings.DB_DRIVER_NAME,   # e.g., "mysql+aiomysql", "sqlite+aiosqlite"
        username=settings.DB_USERNAME,
        password=settings.DB_PASSWORD,
        host=settings.DB_HOST,
        port=settings.DB_PORT,
        database=settings.DB_DATABASE_NAME,
    )


def create_pool(settings: Settings) -> EnginePool:
    """
    Create an `EnginePool` for the database described by `settings`.

    Parameters
    ----------
    settings : Settings
        Database settings (driver, credentials, host, database, pool size).

    Returns
    -------
    EnginePool
        Pool handle wrapping a freshly created `AsyncEngine`.
    """
    url = build_connection_url(settings)
    engine_kwargs = {}
    if url.get_backend_name() != "sqlite":
        engine_kwargs["pool_size"] = settings.DB_POOL_SIZE
        engine_kwargs["pool_pre_ping"] = True
    return EnginePool(create_async_engine(url, **engine_kwargs))


def create_pool_registry(settings: Settings) -> Dict[str, EnginePool]:
    """Return a registry holding a single pool under the default pool name."""
    return {settings.DEFAULT_POOL_NAME: create_pool(settings)}
