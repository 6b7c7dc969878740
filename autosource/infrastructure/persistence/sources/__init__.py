"""Concrete DataSource adapters.

Exports InMemoryDataSource, SqlDataSource and the get_data_source() factory
for wiring at the application boundary.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from autosource.infrastructure.database import settings

from .memory import InMemoryDataSource
from .sql import SqlDataSource

R = TypeVar("R", bound=BaseModel)


def get_data_source(
    session: AsyncSession,
    orm_model: type[Any],
    record_model: type[R],
    id_attr: str = "id",
) -> SqlDataSource[R, Any]:
    """Construct a SqlDataSource bound to the given session, sized from settings.

    Intended for use as a dependency:

        async def handler(session: AsyncSession = Depends(get_session)) -> ...:
            people = get_data_source(session, PersonRow, Person)
            found = await people.get(person_id)
    """
    return SqlDataSource(
        session,
        orm_model,
        record_model,
        id_attr=id_attr,
        default_page_size=settings.default_page_size,
        insert_chunk_size=settings.insert_chunk_size,
    )


__all__ = [
    "InMemoryDataSource",
    "SqlDataSource",
    "get_data_source",
]
