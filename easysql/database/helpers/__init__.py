"""
The `helpers` package provides the cross-cutting pieces the runner is built on.

Contents
--------
- errors
    `EasySqlError` and its `ConfigError`, `ValidationError` and `DriverError`
    kinds, each carrying an ordered trail of `(component, operation, cause)` frames.
- pool
    The `ConnectionPool` / `Connection` protocols and `EnginePool`, their
    implementation on a SQLAlchemy `AsyncEngine`.
"""
