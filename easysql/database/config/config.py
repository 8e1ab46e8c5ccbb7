"""
Configuration — Pydantic v2 Settings (env / .env)
=================================================

Purpose
-------
Centralized, strongly-typed configuration using:
- Pydantic v2 `BaseSettings` for environment-driven values
- `pydantic-settings` v2 for `.env` loading and model config
- A plain Pydantic model, `RunnerConfig`, that is handed to the
  `TransactionRunner` explicitly (no process-wide pool registry)

Load Order & Behavior
---------------------
- Values are read from the environment; if not present, `.env` is used.
- Every field has a default, so importing this module never fails.
- `extra="ignore"`: unknown env vars are ignored (not an error).

Usage
-----
from easysql.database.config.config import settings, RunnerConfig

runner_config = RunnerConfig(pools={"GENERAL": pool}, query_count_threshold=settings.QUERY_COUNT_THRESHOLD)
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MYSQL_CONN_POOL_GENERAL = "GENERAL"
"""Name of the pool used when a call does not name one."""

TRANSACTION_QUERY_COUNT_THRESHOLD = 5
"""System-wide default for the maximum number of queries per transaction."""

DEFAULT_GROUP_CONCAT_MAX_LEN = 55555
"""Session value applied when a query asks for the length constraint."""


class Settings(BaseSettings):
    """
    Database and runner settings loaded from environment variables
    or a `.env` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DB_DRIVER_NAME: str = Field("mysql+aiomysql", description="SQLAlchemy async driver (e.g., `mysql+aiomysql`, `sqlite+aiosqlite`).")
    DB_USERNAME: Optional[str] = Field(None, description="Database username credential.")
    DB_PASSWORD: Optional[str] = Field(None, description="Database password credential.")
    DB_HOST: Optional[str] = Field(None, description="Hostname or IP address of the database server.")
    DB_PORT: Optional[int] = Field(None, description="Port of the database server.")
    DB_DATABASE_NAME: Optional[str] = Field(None, description="Name of the database (file path for sqlite).")
    DB_POOL_SIZE: int = Field(10, ge=1, description="Number of pooled connections kept open per engine.")
    DEFAULT_POOL_NAME: str = Field(MYSQL_CONN_POOL_GENERAL, description="Pool selected when a call names none.")
    QUERY_COUNT_THRESHOLD: int = Field(TRANSACTION_QUERY_COUNT_THRESHOLD, ge=1, description="Default maximum number of queries per transaction.")
    GROUP_CONCAT_MAX_LEN: int = Field(DEFAULT_GROUP_CONCAT_MAX_LEN, ge=1, description="`group_concat_max_len` applied for length-constrained queries.")


class RunnerConfig(BaseModel):
    """
    Explicit configuration injected into a `TransactionRunner`.
    """

    model_config = ConfigDict(frozen=True)

    pools: Dict[str, Any] = Field(default_factory=dict, description="Pool registry: pool name -> connection pool handle.")
    default_pool: str = Field(MYSQL_CONN_POOL_GENERAL, description="Pool used when a call does not name one.")
    query_count_threshold: Optional[int] = Field(None, ge=1, description="Instance default for the transaction query limit.")
    group_concat_max_len: int = Field(DEFAULT_GROUP_CONCAT_MAX_LEN, ge=1, description="Value used by the length-constraint session statement.")


# Singleton instance of Settings, ready to be imported across the package
settings = Settings()
"""Settings object built from the environment and the `.env` file."""
