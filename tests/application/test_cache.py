from __future__ import annotations

import pytest

from lib_typed_dotenv.application.cache import ParseCache
from lib_typed_dotenv.domain.records import CacheEntry


def _entry(mtime: float) -> CacheEntry:
    return CacheEntry(mtime=mtime, variables={})


def test_put_replaces_existing_entry() -> None:
    cache = ParseCache()
    cache.put("/a", _entry(1.0))
    cache.put("/a", _entry(2.0))

    assert len(cache) == 1
    assert cache.get("/a").mtime == 2.0  # type: ignore[union-attr]


def test_full_cache_drops_oldest_half() -> None:
    cache = ParseCache(max_entries=4)
    for index in range(4):
        cache.put(f"/{index}", _entry(float(index)))

    cache.put("/new", _entry(9.0))

    assert "/0" not in cache
    assert "/1" not in cache
    assert {"/2", "/3", "/new"} == {path for path in ("/0", "/1", "/2", "/3", "/new") if path in cache}


def test_replacing_does_not_evict_when_full() -> None:
    cache = ParseCache(max_entries=2)
    cache.put("/a", _entry(1.0))
    cache.put("/b", _entry(1.0))
    cache.put("/a", _entry(2.0))

    assert len(cache) == 2


def test_invalidate_and_clear() -> None:
    cache = ParseCache()
    cache.put("/a", _entry(1.0))
    cache.record_hit()
    cache.record_miss()

    assert cache.invalidate("/a") is True
    assert cache.invalidate("/a") is False

    cache.put("/b", _entry(1.0))
    cache.clear()
    assert cache.stats() == {"entries": 0, "hits": 0, "misses": 0, "max_entries": 10_000}


def test_max_entries_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ParseCache(max_entries=0)
