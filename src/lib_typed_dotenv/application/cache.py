"""Path-keyed parse cache.

Purpose
-------
Remember the last parse result of every file together with the modification
time it was computed for, so unchanged files are never parsed twice.

Entries are replaced whole: :meth:`ParseCache.put` performs a single dict
assignment, so readers see either the previous entry or the new one, never a
mixture. There is no lock; concurrent writers for the same path simply race
and one complete entry wins.
"""

from __future__ import annotations

from typing import Final

from ..domain.records import CacheEntry
from ..observability import log_debug

DEFAULT_MAX_ENTRIES: Final[int] = 10_000


class ParseCache:
    """Bounded mapping of path to :class:`CacheEntry`.

    When the cache is full, the oldest half of the entries is dropped before a
    new path is stored.

    Examples
    --------
    >>> cache = ParseCache(max_entries=2)
    >>> cache.put("/a/.env", CacheEntry(mtime=1.0, variables={}))
    >>> cache.get("/a/.env").mtime
    1.0
    >>> cache.stats()["entries"]
    1
    """

    def __init__(self, *, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._entries: dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def get(self, path: str) -> CacheEntry | None:
        return self._entries.get(path)

    def put(self, path: str, entry: CacheEntry) -> None:
        """Store *entry* for *path*, replacing any previous entry in one step."""

        if path not in self._entries and len(self._entries) >= self._max_entries:
            self._evict_oldest_half()
        self._entries[path] = entry

    def invalidate(self, path: str) -> bool:
        """Drop the entry for *path*; return ``True`` when one existed."""

        return self._entries.pop(path, None) is not None

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def record_hit(self) -> None:
        self.hits += 1

    def record_miss(self) -> None:
        self.misses += 1

    def stats(self) -> dict[str, int]:
        """Return entry count, hit/miss counters and the size bound."""

        return {
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "max_entries": self._max_entries,
        }

    def _evict_oldest_half(self) -> None:
        doomed = list(self._entries)[: max(1, self._max_entries // 2)]
        for path in doomed:
            self._entries.pop(path, None)
        log_debug("cache_evicted", stage="cache", path=None, evicted=len(doomed))
