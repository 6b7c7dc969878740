"""Datasource contract and stream helpers.

The abstraction is defined here with abc.ABC and @abstractmethod.
Concrete adapters live in autosource/infrastructure/persistence/sources/.
"""

from .base import DataSource
from .streams import PagedStream, chunked, collect, iterate

__all__ = [
    "DataSource",
    "PagedStream",
    "chunked",
    "collect",
    "iterate",
]
