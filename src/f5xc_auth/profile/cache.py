"""In-memory TTL cache used to avoid repeated profile file reads."""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_TTL = 300.0


@dataclass
class CacheEntry(Generic[T]):
    """Cached value with its insertion time and time-to-live (seconds)."""

    data: T
    timestamp: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


class TTLCache(Generic[T]):
    """Simple TTL cache.

    Entries expire ``ttl`` seconds after insertion. Not thread-safe; callers
    share it on a single event loop.

    Args:
        default_ttl: Default time-to-live in seconds (5 minutes).
        enabled: When False, ``set`` is a no-op and ``get`` always misses.
        clock: Monotonic clock, injectable for tests.

    Example:
        ```python
        cache = TTLCache[Profile](default_ttl=300)
        cache.set("default", profile)
        cache.get("default")
        cache.invalidate("default")
        ```
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.enabled = enabled
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    def set(self, key: str, data: T, ttl: float | None = None) -> None:
        if not self.enabled:
            return
        ttl = ttl if ttl is not None else self.default_ttl
        self._entries[key] = CacheEntry(data=data, timestamp=self._clock(), ttl=ttl)

    def get(self, key: str) -> T | None:
        """Return the cached value, or None when missing, expired or disabled."""
        if not self.enabled:
            return None
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry.data

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        """All keys, including expired entries not yet cleaned up."""
        return list(self._entries)

    def cleanup(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def stats(self) -> dict[str, float | int | bool]:
        return {"size": len(self._entries), "enabled": self.enabled, "default_ttl": self.default_ttl}
