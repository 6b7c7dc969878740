"""Persistence package.

Exports the DataSource adapters and the DI factory.
"""

from autosource.infrastructure.persistence.sources import (
    InMemoryDataSource,
    SqlDataSource,
    get_data_source,
)

__all__ = [
    "InMemoryDataSource",
    "SqlDataSource",
    "get_data_source",
]
