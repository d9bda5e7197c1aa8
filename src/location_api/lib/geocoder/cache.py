"""In-memory TTL cache with an injectable clock.

Entries expire lazily on read and are removed in bulk by ``sweep()``; an
expired entry is never returned.  Writes replace whole entries, so two
resolutions racing on the same key end with the last write.
"""

import asyncio
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from loguru import logger


K = TypeVar("K")
V = TypeVar("V")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry(Generic[K, V]):
    """A cached value with its insertion time and time-to-live (seconds)."""

    key: K
    value: V
    inserted_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.inserted_at >= self.ttl


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of a cache's contents and counters."""

    name: str
    size: int
    keys: list[Any]
    hits: int
    misses: int


class TTLCache(Generic[K, V]):
    """A dictionary whose entries disappear after their TTL.

    Args:
        default_ttl: TTL in seconds for entries stored without an explicit one.
        clock: Monotonic time source, replaceable in tests.
        name: Label used in logs and stats.
    """

    def __init__(self, default_ttl: float, *, clock: Clock = time.monotonic, name: str = "cache") -> None:
        if default_ttl <= 0:
            msg = f"default_ttl must be positive, got {default_ttl}"
            raise ValueError(msg)
        self._default_ttl = default_ttl
        self._clock = clock
        self._name = name
        self._entries: dict[K, CacheEntry[K, V]] = {}
        self._hits = 0
        self._misses = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def get(self, key: K) -> V | None:
        """Return the live value for ``key`` or None, evicting it if expired."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if entry.is_expired(self._clock()):
            self._entries.pop(key, None)
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    def set(self, key: K, value: V, ttl: float | None = None) -> None:
        """Store (or replace) ``key``."""
        effective = self._default_ttl if ttl is None else ttl
        if effective <= 0:
            msg = f"ttl must be positive, got {effective}"
            raise ValueError(msg)
        self._entries[key] = CacheEntry(key=key, value=value, inserted_at=self._clock(), ttl=effective)

    def delete(self, key: K) -> bool:
        """Remove ``key``; returns whether it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def sweep(self) -> int:
        """Remove every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def keys(self) -> list[K]:
        """Keys of entries that are still live."""
        now = self._clock()
        return [key for key, entry in self._entries.items() if not entry.is_expired(now)]

    def stats(self) -> CacheStats:
        live = self.keys()
        return CacheStats(name=self._name, size=len(live), keys=live, hits=self._hits, misses=self._misses)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[call-overload]
        return entry is not None and not entry.is_expired(self._clock())

    def __len__(self) -> int:
        return len(self.keys())


async def run_periodic_sweep(caches: Iterable[TTLCache[Any, Any]], interval: float) -> None:
    """Background asyncio loop that sweeps expired entries from every cache.

    Args:
        caches: Caches to sweep.
        interval: Seconds between sweeps.
    """
    caches = list(caches)
    logger.info("Cache sweep loop started (interval={}s, caches={})", interval, len(caches))

    while True:
        try:
            await asyncio.sleep(interval)
            removed = sum(cache.sweep() for cache in caches)
            if removed > 0:
                logger.debug("Swept {} expired cache entr(ies)", removed)
        except asyncio.CancelledError:
            logger.info("Cache sweep loop cancelled")
            break
        except Exception:
            logger.exception("Cache sweep loop error")
