"""
Key-value cache with per-key TTL used to persist circuit breaker state.

Features:
- CacheStore interface so the breaker can sit on memory, Redis, etc.
- InMemoryCache with lazy purge of expired entries on access
- TTL as seconds or timedelta, None for no expiry
- Thread-safe async operations
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from loguru import logger

Ttl = float | timedelta | None


class CacheStore(ABC):
    """
    Storage medium for circuit breaker state.

    Implementations may raise on an unavailable backend; the breaker treats
    any such failure as "no state recorded".
    """

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the value for key, or default if missing or expired."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Ttl = None) -> bool:
        """Store value under key, expiring after ttl if given."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove key."""
        ...

    @abstractmethod
    async def has(self, key: str) -> bool:
        """Whether key holds an unexpired value."""
        ...


@dataclass
class CacheEntry:
    """A single cache entry with its absolute expiry."""

    value: Any
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now


class InMemoryCache(CacheStore):
    """
    Async-compatible in-memory cache with per-key TTL.

    Usage:
        cache = InMemoryCache()

        await cache.set("circuit_breaker:PhoneClient:failures", 2, ttl=600)
        count = await cache.get("circuit_breaker:PhoneClient:failures", 0)
    """

    def __init__(
        self,
        max_size: int | None = None,
        clock: Callable[[], float] = time.time,
        debug: bool = False,
    ):
        self._memory: dict[str, CacheEntry] = {}
        self._max_size = max_size
        self._clock = clock
        self._debug = debug
        self._lock = asyncio.Lock()
        self._stats = CacheStats()

    async def get(self, key: str, default: Any = None) -> Any:
        async with self._lock:
            self._purge_expired()

            entry = self._memory.get(key)
            if entry is None:
                self._stats.misses += 1
                self._log(f"MISS: {key}")
                return default

            self._stats.hits += 1
            self._log(f"HIT: {key}")
            return entry.value

    async def set(self, key: str, value: Any, ttl: Ttl = None) -> bool:
        expires_at = None
        if ttl is not None:
            expires_at = self._clock() + _ttl_seconds(ttl)

        async with self._lock:
            if (
                self._max_size is not None
                and len(self._memory) >= self._max_size
                and key not in self._memory
            ):
                self._purge_expired()
                if len(self._memory) >= self._max_size:
                    self._evict_soonest()

            self._memory[key] = CacheEntry(value=value, expires_at=expires_at)
            self._log(f"SET: {key} (TTL: {ttl})")
            return True

    async def delete(self, key: str) -> bool:
        async with self._lock:
            self._memory.pop(key, None)
            self._log(f"DELETE: {key}")
            return True

    async def has(self, key: str) -> bool:
        async with self._lock:
            self._purge_expired()
            return key in self._memory

    async def clear(self) -> bool:
        """Clear all cache entries."""
        async with self._lock:
            count = len(self._memory)
            self._memory.clear()
            self._log(f"CLEAR: {count} entries removed")
            return True

    async def get_many(
        self, keys: Iterable[str], default: Any = None
    ) -> dict[str, Any]:
        return {key: await self.get(key, default) for key in keys}

    async def set_many(self, values: dict[str, Any], ttl: Ttl = None) -> bool:
        for key, value in values.items():
            if not isinstance(key, str):
                raise TypeError("Cache key must be a string")
            if not await self.set(key, value, ttl):
                return False
        return True

    async def delete_many(self, keys: Iterable[str]) -> bool:
        for key in keys:
            await self.delete(key)
        return True

    async def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns count of removed entries."""
        async with self._lock:
            return self._purge_expired()

    def _purge_expired(self) -> int:
        """Drop expired entries. Must be called with the lock held."""
        now = self._clock()
        expired_keys = [k for k, v in self._memory.items() if v.is_expired(now)]
        for key in expired_keys:
            del self._memory[key]

        if expired_keys:
            self._stats.expirations += len(expired_keys)
            self._log(f"EXPIRED: {len(expired_keys)} entries removed")

        return len(expired_keys)

    def _evict_soonest(self) -> None:
        """Evict the entry closest to expiry, preferring ones with a TTL."""
        if not self._memory:
            return

        victim = min(
            self._memory,
            key=lambda k: (
                self._memory[k].expires_at is None,
                self._memory[k].expires_at or 0.0,
            ),
        )
        del self._memory[victim]
        self._stats.evictions += 1
        self._log(f"EVICT: {victim}")

    def get_stats(self) -> "CacheStats":
        """Get cache statistics."""
        self._stats.size = len(self._memory)
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[InMemoryCache] {message}")


def _ttl_seconds(ttl: float | timedelta) -> float:
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    expirations: int = 0
    evictions: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "expirations": self.expirations,
            "evictions": self.evictions,
            "size": self.size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }
