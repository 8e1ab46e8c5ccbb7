"""
Pydantic models describing query requests and their results.

Callers may pass plain dicts (``{"sql": ..., "args": ..., "suffix": ...}``)
wherever a `QueryRequest` is expected; they are coerced by the runner.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    """A single SQL statement with its bind values."""
    sql: Optional[str] = Field(None, description="SQL text to execute.", example="SELECT * FROM users WHERE id = ?")
    args: Union[Sequence[Any], Mapping[str, Any], None] = Field(
        None,
        description="Positional bind values (driver paramstyle) or named binds (`:name`).",
        example=[42],
    )
    suffix: Optional[str] = Field(None, description="Text appended verbatim to `sql`.", example=" LIMIT 1")

    @property
    def final_sql(self) -> str:
        """`sql` with `suffix` appended when present."""
        if self.suffix:
            return self.sql + self.suffix
        return self.sql


class QueryResult(BaseModel):
    """Rows produced by one query of a transaction."""
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="One dict per returned row.")


TransactionResult = List[QueryResult]
"""Per-query results of a committed transaction, in submission order."""
