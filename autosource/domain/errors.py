"""Failure category shared by every DataSource operation."""

from __future__ import annotations


class DataSourceError(Exception):
    """A backend operation failed.

    operation is the contract operation name (e.g. "insert", "find_stream").
    cause is the backend-specific exception, also chained as __cause__ when
    raised with ``raise DataSourceError(...) from exc``.
    """

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(f"{operation} failed: {detail}")
