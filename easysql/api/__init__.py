"""
The `api` package holds the data contracts callers use with the runner.

Contents:
    - models: `QueryRequest` (sql, args, suffix), `QueryResult` and the
      `TransactionResult` alias.
"""
