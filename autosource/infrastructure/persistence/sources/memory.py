"""Dict-backed DataSource over Pydantic records.

Records are kept in an insertion-ordered dict keyed by id, so the natural
match order is insertion order.  Batch operations are all-or-nothing: the
store is only written once every record of the batch has been prepared.
Records are copied on the way in and out, so callers never share an
instance with the store.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable
from typing import Any, TypeVar
from uuid import uuid4

from pydantic import BaseModel

from autosource.domain.errors import DataSourceError
from autosource.domain.models import Patch, Selector, field_value
from autosource.domain.sources import DataSource, PagedStream, iterate

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


def _sort_key(value: Any) -> tuple[bool, Any]:
    # None sorts after every value in ascending order
    return (value is None, value)


class InMemoryDataSource(DataSource[R, Any, Selector, Patch]):
    """In-process adapter; nothing survives the instance.

    id_field names the record attribute carrying the id.  When it is None,
    or the record's value for it is None, insert generates an id with
    id_factory and (if id_field is set) writes it back into the stored copy.
    """

    def __init__(
        self,
        id_field: str | None = "id",
        id_factory: Callable[[], Any] = uuid4,
        default_page_size: int = 100,
    ) -> None:
        if default_page_size <= 0:
            raise ValueError(f"default_page_size must be positive, got {default_page_size}")
        self._records: dict[Any, R] = {}
        self._id_field = id_field
        self._id_factory = id_factory
        self._default_page_size = default_page_size

    def __len__(self) -> int:
        return len(self._records)

    # --- helpers ---

    def _check_id_field(self, operation: str, record: R) -> None:
        if self._id_field is not None and self._id_field not in type(record).model_fields:
            raise DataSourceError(
                operation,
                ValueError(f"{type(record).__name__} has no id field {self._id_field!r}"),
            )

    def _assign_id(self, operation: str, record: R) -> tuple[R, Any]:
        self._check_id_field(operation, record)
        if self._id_field is not None:
            current = getattr(record, self._id_field)
            if current is not None:
                return record, current
        new_id = self._id_factory()
        if self._id_field is not None:
            record = record.model_copy(update={self._id_field: new_id})
        return record, new_id

    def _with_id(self, operation: str, record: R, id: Any) -> R:
        if self._id_field is None:
            return record
        self._check_id_field(operation, record)
        embedded = getattr(record, self._id_field)
        if embedded is None:
            return record.model_copy(update={self._id_field: id})
        if embedded != id:
            raise DataSourceError(
                operation, ValueError(f"record id {embedded!r} does not match {id!r}")
            )
        return record

    def _patch(self, operation: str, record: R, update: Patch) -> R:
        if self._id_field is not None and self._id_field in update.fields:
            raise DataSourceError(operation, ValueError(f"cannot patch id field {self._id_field!r}"))
        try:
            return update.apply(record)  # type: ignore[return-value]
        except ValueError as exc:
            raise DataSourceError(operation, exc) from exc

    def _select(self, operation: str, query: Selector) -> list[tuple[R, Any]]:
        try:
            pairs = [(record, id) for id, record in self._records.items() if query.matches(record)]
            if query.order_by is not None:
                name = query.order_by
                pairs.sort(
                    key=lambda pair: _sort_key(field_value(pair[0], name)),
                    reverse=query.descending,
                )
        except TypeError as exc:
            # incomparable values in the selector or the sort field
            raise DataSourceError(operation, exc) from exc
        return pairs

    def _lookup(self, operation: str, id: Any) -> R | None:
        try:
            return self._records.get(id)
        except TypeError as exc:
            # unhashable id
            raise DataSourceError(operation, exc) from exc

    @staticmethod
    def _detached(pairs: list[tuple[R, Any]]) -> list[tuple[R, Any]]:
        return [(record.model_copy(deep=True), id) for record, id in pairs]

    # --- single-record operations ---

    async def insert(self, record: R) -> Any:
        record, id = self._assign_id("insert", record)
        if self._lookup("insert", id) is not None:
            raise DataSourceError("insert", KeyError(f"duplicate id {id!r}"))
        self._records[id] = record.model_copy(deep=True)
        return id

    async def get(self, id: Any) -> tuple[R, Any] | None:
        record = self._lookup("get", id)
        return (record.model_copy(deep=True), id) if record is not None else None

    async def delete(self, id: Any) -> None:
        if self._lookup("delete", id) is not None:
            del self._records[id]

    async def update(self, id: Any, record: R) -> None:
        if self._lookup("update", id) is None:
            raise DataSourceError("update", KeyError(f"no record with id {id!r}"))
        self._records[id] = self._with_id("update", record, id).model_copy(deep=True)

    async def update_partial(self, id: Any, update: Patch) -> None:
        current = self._lookup("update_partial", id)
        if current is None:
            raise DataSourceError("update_partial", KeyError(f"no record with id {id!r}"))
        self._records[id] = self._patch("update_partial", current, update)

    # --- queries ---

    async def find(self, query: Selector, limit: int = 0, skip: int = 0) -> list[tuple[R, Any]]:
        self.check_window("find", limit=limit, skip=skip)
        pairs = self._select("find", query)[skip:]
        return self._detached(pairs[:limit] if limit else pairs)

    def find_stream(
        self, query: Selector, skip: int = 0, page_size: int = 0
    ) -> PagedStream[tuple[R, Any]]:
        async def pages() -> AsyncIterator[list[tuple[R, Any]]]:
            self.check_window("find_stream", skip=skip, page_size=page_size)
            size = page_size or self._default_page_size
            matched = self._select("find_stream", query)[skip:]
            for start in range(0, len(matched), size):
                yield self._detached(matched[start : start + size])

        return PagedStream(pages)

    # --- batches ---

    async def batch_insert(self, records: AsyncIterable[R] | Iterable[R]) -> int:
        staged: dict[Any, R] = {}
        try:
            async for record in iterate(records):
                record, id = self._assign_id("batch_insert", record)
                if self._lookup("batch_insert", id) is not None or id in staged:
                    raise DataSourceError("batch_insert", KeyError(f"duplicate id {id!r}"))
                staged[id] = record.model_copy(deep=True)
        except DataSourceError:
            logger.warning("batch_insert aborted after %d staged record(s)", len(staged))
            raise
        except Exception as exc:
            logger.warning("batch_insert source failed after %d staged record(s)", len(staged))
            raise DataSourceError("batch_insert", exc) from exc
        # other coroutines may have inserted while the source was awaited
        taken = [id for id in staged if id in self._records]
        if taken:
            logger.warning("batch_insert aborted: %d id(s) inserted concurrently", len(taken))
            raise DataSourceError("batch_insert", KeyError(f"duplicate id {taken[0]!r}"))
        self._records.update(staged)
        logger.debug("batch_insert stored %d record(s)", len(staged))
        return len(staged)

    async def batch_delete(self, query: Selector) -> None:
        doomed = [id for _, id in self._select("batch_delete", query)]
        for id in doomed:
            del self._records[id]
        logger.debug("batch_delete removed %d record(s)", len(doomed))

    async def batch_update(self, query: Selector, update: Patch) -> None:
        patched = [
            (id, self._patch("batch_update", record, update))
            for record, id in self._select("batch_update", query)
        ]
        self._records.update(patched)
        logger.debug("batch_update patched %d record(s)", len(patched))
