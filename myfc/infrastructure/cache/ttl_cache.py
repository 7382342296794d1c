"""In-process TTL cache with bounded size.

Replaces ad hoc module-level dictionaries with an explicit object that is
created once and injected where it is needed.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0


class TTLCache(Generic[K, V]):
    """Least-recently-used cache whose entries expire after ``ttl_seconds``.

    When full, expired entries are purged first and then the least recently
    used entry is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 1000,
        *,
        name: str = "ttl_cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.name = name
        self._clock = clock
        self._entries: OrderedDict[K, tuple[float, V]] = OrderedDict()
        self._generation = 0
        self.stats = CacheStats()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[call-overload]
        return entry is not None and entry[0] > self._clock()

    @property
    def generation(self) -> int:
        """Incremented by every :meth:`clear`; clients compare it to detect resets."""
        return self._generation

    def get(self, key: K) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            self.stats.misses += 1
            return None

        expires_at, value = entry
        if expires_at <= self._clock():
            del self._entries[key]
            self.stats.misses += 1
            self.stats.expirations += 1
            return None

        self._entries.move_to_end(key)
        self.stats.hits += 1
        return value

    def set(self, key: K, value: V) -> None:
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_entries:
            self._make_room()
        self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def delete(self, key: K) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Drop every entry and start a new generation."""
        dropped = len(self._entries)
        self._entries.clear()
        self._generation += 1
        logger.info(
            "ttl_cache_cleared",
            extra={"cache": self.name, "dropped": dropped, "generation": self._generation},
        )
        return dropped

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        self.stats.expirations += len(expired)
        return len(expired)

    def _make_room(self) -> None:
        if self.purge_expired():
            return
        key, _ = self._entries.popitem(last=False)
        self.stats.evictions += 1
        logger.debug("ttl_cache_evicted", extra={"cache": self.name, "key": str(key)[:16]})
