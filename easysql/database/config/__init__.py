"""
The `config` package provides two building blocks for establishing database connections.

Contents:
    - config: Configuration layer - strongly typed settings loaded from environment variables (with .env support), exposed through a singleton Settings object, plus the RunnerConfig handed to the runner
    - connection_engine: Database layer - SQLAlchemy asyncio bootstrap that builds a connection URL from those settings and wraps the resulting AsyncEngine as a pool
"""
