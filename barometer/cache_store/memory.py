"""In-process cache store with lazy TTL expiry."""

import threading
import time
from typing import Any, Callable, Tuple

from barometer.cache_store.base import CacheEntry, CacheStore

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/in_memory_cache_store")


class InMemoryCacheStore(CacheStore):
    """Thread-safe, TTL-aware in-memory store shared by all feed pipelines."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty store; `clock` returns monotonic seconds."""
        logger.debug("Initializing InMemoryCacheStore")
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Tuple[Any, bool]:
        """Return the cached value if fresh; expired entries are dropped here."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None, False
            if entry.is_expired(self._clock()):
                self._entries.pop(key, None)
                logger.debug("Cache entry expired", extra={"key": key})
                return None, False
            return entry.value, True

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value for `ttl_seconds`; last write wins."""
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)

    def delete(self, key: str) -> None:
        """Remove an entry if it exists."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Clear all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
