"""
Key/value cache with per-entry expiry.
Used to remember inferred repository icons between requests.
"""

import time
from typing import Callable, Protocol


class CacheBackend(Protocol):
    """The get/put-with-TTL interface the icon resolver depends on."""

    def get(self, key: str) -> str | None:
        ...

    def put(self, key: str, value: str, ttl: int) -> None:
        ...


class MemoryCache:
    """
    In-process cache. Expired entries are dropped when read, and swept
    whenever a new value is stored.

    Concurrent misses on the same key may both compute and store a value;
    the last write wins.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def put(self, key: str, value: str, ttl: int) -> None:
        now = self._clock()
        self._purge(now)
        self._entries[key] = (value, now + ttl)

    def _purge(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
