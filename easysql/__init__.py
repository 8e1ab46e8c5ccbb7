"""
easysql — a thin async convenience wrapper over pooled SQL connections.

Contents:
    - api:
        Pydantic models for query requests and results.

    - database:
        Configuration, the connection-pool port and its SQLAlchemy adapter,
        error types, and the `TransactionRunner` itself.
"""

from easysql.api.models import QueryRequest, QueryResult, TransactionResult
from easysql.database.config.config import RunnerConfig, Settings, settings
from easysql.database.core.runner import TransactionRunner
from easysql.database.helpers.errors import Breadcrumb, ConfigError, DriverError, EasySqlError, ValidationError

__all__ = [
    "TransactionRunner",
    "RunnerConfig",
    "Settings",
    "settings",
    "QueryRequest",
    "QueryResult",
    "TransactionResult",
    "EasySqlError",
    "ConfigError",
    "ValidationError",
    "DriverError",
    "Breadcrumb",
]
