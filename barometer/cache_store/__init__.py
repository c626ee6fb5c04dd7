"""Cache storage backends."""

from .base import CacheEntry, CacheStore
from .memory import InMemoryCacheStore

__all__ = [
    "CacheEntry",
    "CacheStore",
    "InMemoryCacheStore",
]
