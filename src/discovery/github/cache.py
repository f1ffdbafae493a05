# src/discovery/github/cache.py

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Optional, TypeVar

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 15 * 60


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    timestamp: float

    def is_valid(self, now: float, ttl: float) -> bool:
        return now - self.timestamp < ttl


class TTLCache(Generic[T]):
    """
    Key -> value memo with a fixed time-to-live.

    Expired entries are treated as misses but are left in place until they
    are overwritten or pushed out by the size bound (least recently used
    first).
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[Hashable, CacheEntry[T]]" = OrderedDict()

    def get(self, key: Hashable) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_valid(self._clock(), self.ttl):
            return None

        self._entries.move_to_end(key)
        return entry.value

    def put(self, key: Hashable, value: T):
        self._entries[key] = CacheEntry(value=value, timestamp=self._clock())
        self._entries.move_to_end(key)

        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RepoCache:
    """
    The five independently keyed tables used by the repository service.

    popular:        (page, normalized query) -> list of raw summaries
    trending:       page -> list of raw summaries
    by_id:          repository id -> ProcessedRepository
    by_full_name:   "owner/name" -> ProcessedRepository
    search_results: (lower-cased query, page, limit) -> list of raw summaries
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.popular = TTLCache(ttl, max_entries, clock)
        self.trending = TTLCache(ttl, max_entries, clock)
        self.by_id = TTLCache(ttl, max_entries, clock)
        self.by_full_name = TTLCache(ttl, max_entries, clock)
        self.search_results = TTLCache(ttl, max_entries, clock)

    def clear(self):
        for table in (self.popular, self.trending, self.by_id, self.by_full_name, self.search_results):
            table.clear()
