"""Generic datasource contract.

DataSource[T, Id, Query, Update] is the root abstraction every storage
adapter implements.  Concrete adapters live in
autosource/infrastructure/persistence/sources/ and are wired at the
application boundary.

Design notes:
  - T is the record type; its structure is opaque to the contract.
  - Id is kept separate from T even when T embeds it, so reads return
    (record, id) pairs.
  - Query selects records for find / find_stream / batch_delete /
    batch_update; Update describes a partial mutation.
  - All operations are coroutines run on the caller's event loop, except
    find_stream which returns a PagedStream consumed with ``async for``.
  - Every failure is raised as DataSourceError; a missing id on get() is
    None, not a failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, Iterable
from typing import Generic, TypeVar

from autosource.domain.errors import DataSourceError

from .streams import PagedStream

T = TypeVar("T")
Id = TypeVar("Id")
Query = TypeVar("Query")
Update = TypeVar("Update")


class DataSource(ABC, Generic[T, Id, Query, Update]):
    """Abstract asynchronous CRUD, query and batch interface over one record type."""

    @abstractmethod
    async def insert(self, record: T) -> Id:
        """Store record and return its id (generated, or the one it already carries)."""

    @abstractmethod
    async def get(self, id: Id) -> tuple[T, Id] | None:
        """Return (record, id) for the given id, or None if not found."""

    @abstractmethod
    async def delete(self, id: Id) -> None:
        """Remove the record with the given id.  Absent ids are a no-op."""

    @abstractmethod
    async def update(self, id: Id, record: T) -> None:
        """Replace the full content of the record with the given id."""

    @abstractmethod
    async def update_partial(self, id: Id, update: Update) -> None:
        """Apply a partial update to the record with the given id."""

    @abstractmethod
    async def find(self, query: Query, limit: int = 0, skip: int = 0) -> list[tuple[T, Id]]:
        """Return matching (record, id) pairs.

        limit=0 means unbounded and skip=0 means no offset.  skip counts from
        the start of the natural match order (or the query's own ordering).
        """

    @abstractmethod
    def find_stream(
        self, query: Query, skip: int = 0, page_size: int = 0
    ) -> PagedStream[tuple[T, Id]]:
        """Return matching pairs as a restartable stream of pages.

        Each page holds at most page_size pairs (0 selects the adapter's
        default).  Concatenating every page gives find(query, skip=skip).
        Failures are raised while iterating.
        """

    @abstractmethod
    async def batch_insert(self, records: AsyncIterable[T] | Iterable[T]) -> int:
        """Consume records lazily, store each, and return how many were stored."""

    @abstractmethod
    async def batch_delete(self, query: Query) -> None:
        """Delete every record matching query."""

    @abstractmethod
    async def batch_update(self, query: Query, update: Update) -> None:
        """Apply update to every record matching query."""

    @staticmethod
    def check_window(operation: str, *, limit: int = 0, skip: int = 0, page_size: int = 0) -> None:
        """Raise DataSourceError when any pagination argument is negative."""
        for name, value in (("limit", limit), ("skip", skip), ("page_size", page_size)):
            if value < 0:
                raise DataSourceError(operation, ValueError(f"{name} must be >= 0, got {value}"))
