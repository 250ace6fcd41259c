"""
Bounded in-memory cache with per-entry TTL.

Expired entries are dropped lazily when read; nothing runs in the
background. ``purge_expired()`` sweeps explicitly for callers that want to
reclaim memory from entries nobody reads again.

When the cache is full, inserting a new key evicts the entry that was
inserted earliest, regardless of when it expires.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


@dataclass
class CacheEntry(Generic[V]):
    """A cached value with its insertion and expiry times."""

    value: V
    inserted_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class CacheStats:
    """Snapshot of cache occupancy."""

    size: int
    oldest_entry: float | None
    newest_entry: float | None


class BoundedTTLCache(Generic[K, V]):
    """
    Key-value cache with expiry and an optional size bound.

    Args:
        max_size: Maximum entry count, or None for unbounded
        default_ttl: TTL in seconds used when ``set`` is called without one
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        max_size: int | None = None,
        default_ttl: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.default_ttl = default_ttl
        self._clock = clock
        # Dict order is insertion order; re-inserting a key moves it to the end.
        self._entries: dict[K, CacheEntry[V]] = {}

    def get(self, key: K, default: V | None = None) -> V | None:
        """Return the live value for ``key``, or ``default`` on a miss."""
        entry = self._entries.get(key)
        if entry is None:
            return default

        if entry.is_expired(self._clock()):
            del self._entries[key]
            return default

        return entry.value

    def set(self, key: K, value: V, ttl: float | None = None) -> None:
        """Insert or replace ``key``, evicting the oldest entry if full."""
        now = self._clock()
        ttl = self.default_ttl if ttl is None else ttl

        if key in self._entries:
            del self._entries[key]
        elif self.max_size is not None and len(self._entries) >= self.max_size:
            self._evict_oldest()

        self._entries[key] = CacheEntry(value=value, inserted_at=now, expires_at=now + ttl)

    def _evict_oldest(self) -> None:
        oldest = next(iter(self._entries))
        del self._entries[oldest]

    def remove(self, key: K) -> bool:
        """Delete one entry. Returns whether it existed."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def stats(self) -> CacheStats:
        if not self._entries:
            return CacheStats(size=0, oldest_entry=None, newest_entry=None)
        times = [e.inserted_at for e in self._entries.values()]
        return CacheStats(size=len(times), oldest_entry=min(times), newest_entry=max(times))

    def __contains__(self, key: object) -> bool:
        return self.get(key, _MISSING) is not _MISSING  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self._entries)

