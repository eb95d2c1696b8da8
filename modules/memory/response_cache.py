"""
modules/memory/response_cache.py
----------------------------------
Optional key/value cache for memoizing destination batches and preference
lookups. Clients consult it before each external fetch and populate it after.

In-memory backend only, with a per-entry TTL. A disabled cache is passed
around as None.
"""

from __future__ import annotations
import threading
import time
from typing import Any, Callable, Optional

import config


class ResponseCache:
    """Thread-safe in-process TTL cache."""

    def __init__(
        self,
        default_ttl: int = config.CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store a value; expired entries are swept on every write."""
        lifetime = self.default_ttl if ttl is None else ttl
        with self._lock:
            now = self._clock()
            for stale in [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]:
                del self._entries[stale]
            self._entries[key] = (now + lifetime, value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def build_cache() -> Optional[ResponseCache]:
    """Cache configured from config.CACHE_ENABLED; None when disabled."""
    return ResponseCache() if config.CACHE_ENABLED else None
