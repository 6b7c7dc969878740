"""Tests for the get_data_source() DI factory."""

import uuid
from unittest.mock import AsyncMock

from pydantic import BaseModel
from sqlalchemy import Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from autosource.infrastructure.database import Base, settings
from autosource.infrastructure.persistence import (
    InMemoryDataSource,
    SqlDataSource,
    get_data_source,
)


class TagRow(Base):
    __tablename__ = "test_tags"

    tag_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    label: Mapped[str] = mapped_column(Text, nullable=False)


class Tag(BaseModel):
    tag_id: uuid.UUID | None = None
    label: str


def test_get_data_source_returns_sql_data_source():
    assert isinstance(get_data_source(AsyncMock(), TagRow, Tag, id_attr="tag_id"), SqlDataSource)


def test_get_data_source_uses_configured_sizes():
    source = get_data_source(AsyncMock(), TagRow, Tag, id_attr="tag_id")
    assert source._default_page_size == settings.default_page_size
    assert source._insert_chunk_size == settings.insert_chunk_size


def test_in_memory_data_source_exported():
    assert InMemoryDataSource.__name__ == "InMemoryDataSource"
