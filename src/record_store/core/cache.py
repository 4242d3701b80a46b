"""In-memory query cache with TTL and LRU capacity.

Catalog reads go through this cache; any catalog write clears it entirely.
Values are deep-copied on the way in and out so a caller mutating a returned
entity cannot corrupt what later readers see.
"""

from __future__ import annotations

import copy
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0
DEFAULT_MAX_ENTRIES = 100


@dataclass(slots=True)
class CacheEntry:
    """Cache entry with expiration support."""

    value: Any
    cached_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if the cache entry has expired."""
        return now >= self.expires_at


class QueryCache:
    """Read-through cache keyed by serialized query parameters or entity IDs."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.default_ttl = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._clears = 0
        self._generation = 0

    async def get(self, key: str) -> Optional[Any]:
        """Get a copy of the cached value, or None on a miss or expiry."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            self._misses += 1
            return None

        self._entries.move_to_end(key)
        self._hits += 1
        logger.debug(f"Cache hit: {key}")
        return copy.deepcopy(entry.value)

    @property
    def generation(self) -> int:
        """Counter bumped by every clear."""
        return self._generation

    async def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: Optional[float] = None,
        generation: Optional[int] = None,
    ) -> None:
        """Cache a copy of ``value`` for ``ttl_seconds`` (defaults to the cache TTL).

        When ``generation`` is given and the cache has been cleared since it
        was read, the value is dropped: it was loaded before a write landed.
        """
        if generation is not None and generation != self._generation:
            logger.debug(f"Cache set skipped for {key}: cleared while loading")
            return

        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        now = self._clock()
        self._entries[key] = CacheEntry(
            value=copy.deepcopy(value),
            cached_at=now,
            expires_at=now + ttl,
        )
        self._entries.move_to_end(key)

        while len(self._entries) > self.max_entries:
            evicted_key, _ = self._entries.popitem(last=False)
            self._evictions += 1
            logger.debug(f"Cache evicted least recently used key: {evicted_key}")

    async def clear(self) -> None:
        """Drop every entry."""
        dropped = len(self._entries)
        self._entries.clear()
        self._clears += 1
        self._generation += 1
        logger.debug(f"Cache cleared ({dropped} entries dropped)")

    def cleanup_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        lookups = self._hits + self._misses
        return {
            'entries': len(self._entries),
            'max_entries': self.max_entries,
            'ttl_seconds': self.default_ttl,
            'hits': self._hits,
            'misses': self._misses,
            'hit_rate': self._hits / lookups if lookups else 0.0,
            'evictions': self._evictions,
            'clears': self._clears,
        }
