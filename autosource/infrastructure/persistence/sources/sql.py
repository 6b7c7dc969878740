"""SQLAlchemy implementation of DataSource.

Records are Pydantic models mapped onto a caller-supplied ORM class.  The
adapter never commits: the caller owns the transaction (see
autosource.infrastructure.database.get_session).  batch_insert runs inside a
SAVEPOINT so a failed batch leaves no rows behind.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import Select, delete, inspect, or_, select
from sqlalchemy import update as sa_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from autosource.domain.errors import DataSourceError
from autosource.domain.models import Operator, Patch, Selector
from autosource.domain.sources import DataSource, PagedStream, chunked

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)
M = TypeVar("M")

_OPERATORS = {
    Operator.EQ: operator.eq,
    Operator.GT: operator.gt,
    Operator.GTE: operator.ge,
    Operator.LT: operator.lt,
    Operator.LTE: operator.le,
}


@contextmanager
def _translated(operation: str) -> Iterator[None]:
    try:
        yield
    except (SQLAlchemyError, ValidationError) as exc:
        logger.warning("%s failed: %s", operation, exc)
        raise DataSourceError(operation, exc) from exc


class SqlDataSource(DataSource[R, Any, Selector, Patch], Generic[R, M]):
    """DataSource over one ORM-mapped table.

    orm_model is the declarative class holding the rows; record_model is the
    Pydantic type handed to and returned from callers.  Fields are matched by
    name, and record fields without a mapped column are ignored on write.
    id_attr names the primary-key attribute used as Id.
    """

    def __init__(
        self,
        session: AsyncSession,
        orm_model: type[M],
        record_model: type[R],
        id_attr: str = "id",
        default_page_size: int = 100,
        insert_chunk_size: int = 500,
    ) -> None:
        mapper = inspect(orm_model)
        columns = {attr.key for attr in mapper.column_attrs}
        if id_attr not in columns:
            raise ValueError(f"{orm_model.__name__} has no column {id_attr!r}")
        if default_page_size <= 0 or insert_chunk_size <= 0:
            raise ValueError("default_page_size and insert_chunk_size must be positive")
        self._session = session
        self._orm = orm_model
        self._record = record_model
        self._id_attr = id_attr
        self._columns = columns
        self._default_page_size = default_page_size
        self._insert_chunk_size = insert_chunk_size

    # --- mapping ---

    def _to_domain(self, row: Any) -> R:
        return self._record.model_validate(row, from_attributes=True)

    def _values(self, record: R) -> dict[str, Any]:
        return {k: v for k, v in record.model_dump().items() if k in self._columns}

    def _to_row(self, record: R) -> M:
        values = self._values(record)
        if values.get(self._id_attr) is None:
            # let the column default / server default assign the key
            values.pop(self._id_attr, None)
        return self._orm(**values)

    def _pair(self, row: Any) -> tuple[R, Any]:
        return self._to_domain(row), getattr(row, self._id_attr)

    # --- statement building ---

    def _column(self, operation: str, name: str) -> Any:
        if name not in self._columns:
            raise DataSourceError(
                operation, ValueError(f"{self._orm.__name__} has no column {name!r}")
            )
        return getattr(self._orm, name)

    @property
    def _id_column(self) -> Any:
        return getattr(self._orm, self._id_attr)

    def _where(self, operation: str, query: Selector) -> list[ColumnElement[bool]]:
        # every referenced field, order_by included, must be a mapped column
        for name in sorted(query.fields):
            self._column(operation, name)
        clauses = []
        for criterion in query.criteria:
            column = self._column(operation, criterion.field)
            value = criterion.value
            if criterion.op == Operator.IN:
                clauses.append(column.in_(list(value)))
            elif criterion.op == Operator.NE:
                # NULL columns count as "not equal", same as in Python
                if value is None:
                    clauses.append(column.is_not(None))
                else:
                    clauses.append(or_(column != value, column.is_(None)))
            else:
                clauses.append(_OPERATORS[criterion.op](column, value))
        return clauses

    def _select(self, operation: str, query: Selector) -> Select[Any]:
        stmt = select(self._orm).where(*self._where(operation, query))
        if query.order_by is not None:
            column = self._column(operation, query.order_by)
            stmt = stmt.order_by(column.desc() if query.descending else column.asc())
        # primary key keeps pagination stable across calls
        return stmt.order_by(self._id_column.asc())

    def _patch_values(self, operation: str, patch: Patch) -> dict[str, Any]:
        if self._id_attr in patch.fields:
            raise DataSourceError(operation, ValueError(f"cannot patch id column {self._id_attr!r}"))
        for name in patch.fields:
            self._column(operation, name)
        return dict(patch.values)

    # --- single-record operations ---

    async def insert(self, record: R) -> Any:
        row = self._to_row(record)
        with _translated("insert"):
            self._session.add(row)
            await self._session.flush()
        return getattr(row, self._id_attr)

    async def get(self, id: Any) -> tuple[R, Any] | None:
        with _translated("get"):
            row = await self._session.get(self._orm, id)
            return (self._to_domain(row), id) if row is not None else None

    async def delete(self, id: Any) -> None:
        with _translated("delete"):
            await self._session.execute(delete(self._orm).where(self._id_column == id))

    async def update(self, id: Any, record: R) -> None:
        values = self._values(record)
        embedded = values.pop(self._id_attr, None)
        if embedded is not None and embedded != id:
            raise DataSourceError(
                "update", ValueError(f"record id {embedded!r} does not match {id!r}")
            )
        with _translated("update"):
            row = await self._session.get(self._orm, id)
            if row is None:
                raise DataSourceError("update", KeyError(f"no record with id {id!r}"))
            for key, value in values.items():
                setattr(row, key, value)
            await self._session.flush()

    async def update_partial(self, id: Any, update: Patch) -> None:
        values = self._patch_values("update_partial", update)
        stmt = (
            sa_update(self._orm)
            .where(self._id_column == id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        with _translated("update_partial"):
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise DataSourceError("update_partial", KeyError(f"no record with id {id!r}"))

    # --- queries ---

    async def find(self, query: Selector, limit: int = 0, skip: int = 0) -> list[tuple[R, Any]]:
        self.check_window("find", limit=limit, skip=skip)
        stmt = self._select("find", query)
        if limit:
            stmt = stmt.limit(limit)
        if skip:
            stmt = stmt.offset(skip)
        with _translated("find"):
            result = await self._session.execute(stmt)
            return [self._pair(row) for row in result.scalars()]

    def find_stream(
        self, query: Selector, skip: int = 0, page_size: int = 0
    ) -> PagedStream[tuple[R, Any]]:
        async def pages() -> AsyncIterator[list[tuple[R, Any]]]:
            self.check_window("find_stream", skip=skip, page_size=page_size)
            size = page_size or self._default_page_size
            stmt = self._select("find_stream", query)
            if skip:
                stmt = stmt.offset(skip)
            with _translated("find_stream"):
                result = await self._session.stream_scalars(stmt.execution_options(yield_per=size))
                try:
                    async for partition in result.partitions(size):
                        yield [self._pair(row) for row in partition]
                finally:
                    await result.close()

        return PagedStream(pages)

    # --- batches ---

    async def batch_insert(self, records: AsyncIterable[R] | Iterable[R]) -> int:
        count = 0
        try:
            async with self._session.begin_nested():
                async for chunk in chunked(records, self._insert_chunk_size):
                    self._session.add_all([self._to_row(record) for record in chunk])
                    await self._session.flush()
                    count += len(chunk)
        except DataSourceError:
            raise
        except Exception as exc:
            logger.warning("batch_insert rolled back after %d record(s): %s", count, exc)
            raise DataSourceError("batch_insert", exc) from exc
        logger.debug("batch_insert stored %d record(s)", count)
        return count

    async def batch_delete(self, query: Selector) -> None:
        stmt = delete(self._orm).where(*self._where("batch_delete", query))
        with _translated("batch_delete"):
            result = await self._session.execute(stmt.execution_options(synchronize_session="fetch"))
        logger.debug("batch_delete removed %s row(s)", result.rowcount)

    async def batch_update(self, query: Selector, update: Patch) -> None:
        values = self._patch_values("batch_update", update)
        stmt = (
            sa_update(self._orm)
            .where(*self._where("batch_update", query))
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        with _translated("batch_update"):
            result = await self._session.execute(stmt)
        logger.debug("batch_update patched %s row(s)", result.rowcount)
