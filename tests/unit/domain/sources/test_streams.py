"""Tests for autosource/domain/sources/streams.py."""

import pytest

from autosource.domain.sources.streams import PagedStream, chunked, collect, iterate


async def _agen(items):
    for item in items:
        yield item


async def _drain(source):
    return [item async for item in source]


# --- iterate ---

async def test_iterate_sync_iterable():
    assert await _drain(iterate([1, 2, 3])) == [1, 2, 3]


async def test_iterate_async_iterable():
    assert await _drain(iterate(_agen([1, 2]))) == [1, 2]


# --- chunked ---

async def test_chunked_groups_and_keeps_remainder():
    assert await _drain(chunked(range(5), 2)) == [[0, 1], [2, 3], [4]]


async def test_chunked_empty_source_yields_nothing():
    assert await _drain(chunked([], 3)) == []


async def test_chunked_rejects_non_positive_size():
    with pytest.raises(ValueError):
        await _drain(chunked([1], 0))


# --- PagedStream ---

async def test_paged_stream_restarts_on_each_iteration():
    calls = []

    def factory():
        calls.append(1)
        return _agen([[1, 2], [3]])

    stream = PagedStream(factory)
    assert await _drain(stream) == [[1, 2], [3]]
    assert await _drain(stream) == [[1, 2], [3]]
    assert len(calls) == 2


async def test_paged_stream_is_lazy():
    calls = []

    def factory():
        calls.append(1)
        return _agen([])

    PagedStream(factory)
    assert calls == []


async def test_collect_flattens_pages():
    assert await collect(PagedStream(lambda: _agen([[1, 2], [3]]))) == [1, 2, 3]
