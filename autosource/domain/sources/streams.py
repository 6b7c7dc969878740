"""Async stream helpers shared by DataSource implementations.

PagedStream — restartable async iterable of pages (find_stream result type)
iterate     — adapt a sync or async iterable to an async iterator
chunked     — group an async iterable into bounded lists
collect     — flatten a paged stream into one list
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable
from typing import Generic, TypeVar

E = TypeVar("E")
P = TypeVar("P")


class PagedStream(Generic[P]):
    """Lazy sequence of pages, restarted on every ``async for``.

    factory is called once per iteration and must return a fresh async
    iterator of pages, so nothing is fetched until the caller starts pulling
    and the producer never runs ahead of the consumer.
    """

    def __init__(self, factory: Callable[[], AsyncIterator[list[P]]]) -> None:
        self._factory = factory

    def __aiter__(self) -> AsyncIterator[list[P]]:
        return self._factory()


async def iterate(source: Iterable[E] | AsyncIterable[E]) -> AsyncIterator[E]:
    if isinstance(source, AsyncIterable):
        async for item in source:
            yield item
    else:
        for item in source:
            yield item


async def chunked(source: Iterable[E] | AsyncIterable[E], size: int) -> AsyncIterator[list[E]]:
    """Yield lists of at most size elements; the last one may be shorter."""
    if size <= 0:
        raise ValueError(f"chunk size must be positive, got {size}")
    chunk: list[E] = []
    async for item in iterate(source):
        chunk.append(item)
        if len(chunk) >= size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


async def collect(stream: AsyncIterable[list[P]]) -> list[P]:
    items: list[P] = []
    async for page in stream:
        items.extend(page)
    return items
