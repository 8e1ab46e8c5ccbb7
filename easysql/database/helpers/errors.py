"""
Error Types with Breadcrumb Context
===================================

Every error raised by the runner is an :class:`EasySqlError`. As an error
travels outward through the call stack, each layer that observes it appends a
:class:`Breadcrumb` frame ``(component, operation, cause)`` via
:meth:`EasySqlError.annotate` and re-raises it. The first frame is therefore
always the deepest point at which the failure was observed.

Kinds
-----
- ``ConfigError``: unknown pool name, missing configuration at construction.
- ``ValidationError``: missing/empty query, empty query list, threshold
  exceeded, malformed query at a given index.
- ``DriverError``: anything surfaced by the database driver (connect, query,
  begin, commit). The driver exception is kept as ``__cause__``.

Rendering
---------
``path`` and ``causes`` render the trail in the compact textual form::

    # -> [TransactionRunner]|(_run_queries) -> [TransactionRunner]|(execute_transaction)
    # -> (_run_queries)|Error executing query -> (execute_transaction)|Failed to complete transaction
"""

from typing import List, NamedTuple, Optional


class Breadcrumb(NamedTuple):
    """One annotation frame attached to an error."""
    component: str
    operation: str
    cause: str


class EasySqlError(Exception):
    """
    Base error carrying an ordered breadcrumb trail.

    Parameters
    ----------
    message : str
        Human-readable description of the failure.
    index : int, optional
        Position of the failing query inside a transaction, if any.
    """

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.index = index
        self.frames: List[Breadcrumb] = []

    def annotate(self, component: str = "*NULL*", operation: str = "*NULL*", cause: str = "*NULL*") -> "EasySqlError":
        """
        Append a breadcrumb frame and return the error itself, so callers can
        write ``raise err.annotate(...)``.
        """
        self.frames.append(Breadcrumb(component, operation, cause))
        return self

    @property
    def path(self) -> str:
        """Component/operation trail, deepest first."""
        return "#" + "".join(f" -> [{f.component}]|({f.operation})" for f in self.frames)

    @property
    def causes(self) -> str:
        """Operation/cause trail, deepest first."""
        return "#" + "".join(f" -> ({f.operation})|{f.cause}" for f in self.frames)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, index={self.index!r}, path={self.path!r})"


class ConfigError(EasySqlError):
    """Raised for unknown pool names or invalid runner configuration."""


class ValidationError(EasySqlError):
    """Raised when a query request or query list is malformed."""


class DriverError(EasySqlError):
    """Raised when the underlying database driver reports a failure."""


def driver_error(exc: BaseException, message: str, index: Optional[int] = None) -> DriverError:
    """
    Wrap a raw driver exception into a :class:`DriverError`.

    The original exception is attached as ``__cause__`` so the driver's own
    traceback stays available to the caller.
    """
    err = DriverError(f"{message}: {exc}", index=index)
    err.__cause__ = exc
    return err
