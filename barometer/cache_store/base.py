"""Shared protocol and entry type for cache backends."""

from dataclasses import dataclass
from typing import Any, Protocol, Tuple


@dataclass
class CacheEntry:
    """A cached value and the monotonic instant after which it is stale."""
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Return True once `now` has passed the expiry instant."""
        return now > self.expires_at


class CacheStore(Protocol):
    """Protocol for key/value stores with per-entry TTL."""

    def get(self, key: str) -> Tuple[Any, bool]:
        """Return `(value, True)` for a fresh entry, `(None, False)` otherwise."""

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store `value`, replacing any previous entry and resetting its expiry."""

    def delete(self, key: str) -> None:
        """Remove an entry without raising if it is absent."""

    def clear(self) -> None:
        """Remove every entry."""
