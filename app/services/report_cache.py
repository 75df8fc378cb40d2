"""
In-memory report cache with TTL freshness, batched LRU eviction and
single-flight request coalescing.

Freshness is measured from an entry's creation; reads only touch
``last_access``, which drives eviction order. At most one load per key is in
flight at any time and every caller waiting on that key observes the same
result or the same exception. Failed loads are never cached.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def report_cache_key(seq: int | str) -> str:
    """Cache key used for per-report detail lookups."""
    return f"report-seq-{seq}"


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    """A cached payload with its creation and last read instants."""

    key: str
    data: T
    timestamp: float
    last_access: float


class SingleFlightCache(Generic[T]):
    """Bounded TTL cache that coalesces concurrent loads for the same key."""

    def __init__(
        self,
        *,
        capacity: int = 1000,
        ttl_seconds: float = 3600.0,
        eviction_fraction: float = 0.2,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive.")
        if not 0 < eviction_fraction <= 1:
            raise ValueError("eviction_fraction must be within (0, 1].")
        self._capacity = capacity
        self._ttl = ttl_seconds
        self._eviction_fraction = eviction_fraction
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}
        self._in_flight: Dict[str, asyncio.Task[T]] = {}

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def is_in_flight(self, key: str) -> bool:
        return key in self._in_flight

    def get(self, key: str) -> Optional[CacheEntry[T]]:
        """Return the fresh entry for ``key`` or ``None``.

        A stale entry is left in place; it only stops counting as a hit.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        now = self._clock()
        if now - entry.timestamp >= self._ttl:
            return None
        entry.last_access = now
        return entry

    async def fetch_or_join(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        """Return a fresh cached value, join an in-flight load, or start one."""
        entry = self.get(key)
        if entry is not None:
            logger.debug("Cache hit for %s", key)
            return entry.data

        task = self._in_flight.get(key)
        if task is not None:
            logger.debug("Joining in-flight load for %s", key)
        else:
            logger.debug("Cache miss for %s", key)
            task = asyncio.ensure_future(self._load(key, loader))
            task.add_done_callback(_consume_exception)
            self._in_flight[key] = task

        # Shielded so one cancelled caller cannot abort the shared load.
        return await asyncio.shield(task)

    async def _load(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        current = asyncio.current_task()
        try:
            value = await loader()
        except BaseException:
            if self._in_flight.get(key) is current:
                del self._in_flight[key]
            raise

        # An invalidation during the load means the value may already be stale.
        if self._in_flight.get(key) is current:
            del self._in_flight[key]
            self._store(key, value)
        return value

    def _store(self, key: str, value: T) -> None:
        now = self._clock()
        self._entries[key] = CacheEntry(
            key=key, data=value, timestamp=now, last_access=now
        )
        self.evict_if_needed()

    def evict_if_needed(self) -> List[str]:
        """Drop the least recently read batch once the capacity is exceeded."""
        if len(self._entries) <= self._capacity:
            return []
        batch = math.ceil(self._eviction_fraction * self._capacity)
        snapshot = sorted(self._entries.values(), key=lambda item: item.last_access)
        evicted = [item.key for item in snapshot[:batch]]
        for key in evicted:
            del self._entries[key]
        logger.info(
            "Evicted %d cache entries (%d remaining)", len(evicted), len(self._entries)
        )
        return evicted

    def invalidate(self, key: str) -> bool:
        """Remove ``key`` and forget any in-flight load; True if an entry existed."""
        self._in_flight.pop(key, None)
        removed = self._entries.pop(key, None) is not None
        if removed:
            logger.info("Invalidated cache entry %s", key)
        return removed

    def invalidate_many(self, keys: Iterable[str]) -> int:
        return sum(1 for key in keys if self.invalidate(key))

    def clear(self) -> None:
        self._entries.clear()
        self._in_flight.clear()


def _consume_exception(task: asyncio.Future) -> None:
    # Avoid "exception was never retrieved" when every waiter went away.
    if not task.cancelled():
        task.exception()


__all__ = ["CacheEntry", "SingleFlightCache", "report_cache_key"]
