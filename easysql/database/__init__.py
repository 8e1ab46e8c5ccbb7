"""
The `database` package is responsible for all interactions with the database.

Contents:
    - config:
        Settings loaded from the environment and the engine/pool factory.

    - helpers:
        Error types with breadcrumb context, and the connection-pool port
        together with its SQLAlchemy asyncio adapter.

    - core:
        The `TransactionRunner`: single queries and all-or-nothing
        transactions on borrowed connections.
"""
