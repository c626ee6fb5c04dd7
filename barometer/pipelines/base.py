"""Cache-aside pipeline skeleton shared by the three feeds.

Every pipeline reads its key from the shared cache store, and on a miss
produces a fresh result from its upstream feed and stores it. What happens when
production fails is an explicit per-pipeline `FailurePolicy`:

- FAIL_SAFE: log, return the pipeline's fallback value, cache nothing.
- PROPAGATE: log and re-raise to the caller.

The lookup/fetch/store sequence is not atomic: concurrent misses for the same
key each call upstream and the last write wins.
"""
from __future__ import annotations

from enum import Enum
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel

from barometer.cache_store import CacheStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="pipelines/base")

ResultT = TypeVar("ResultT", bound=BaseModel)


class FailurePolicy(str, Enum):
    """What a pipeline does when fetching or parsing its feed fails."""
    FAIL_SAFE = "fail_safe"
    PROPAGATE = "propagate"


class CachedPipeline(Generic[ResultT]):
    """Base class: subclasses set `cache_key`/`failure_policy` and implement `_produce`."""

    cache_key: ClassVar[str]
    failure_policy: ClassVar[FailurePolicy]

    def __init__(self, cache: CacheStore, ttl_seconds: float) -> None:
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    def _produce(self) -> ResultT:
        """Fetch, parse and normalize a fresh result."""
        raise NotImplementedError

    def _fallback(self) -> ResultT:
        """Result returned under FAIL_SAFE when `_produce` raises."""
        raise NotImplementedError

    def get(self) -> ResultT:
        """Return the cached result if fresh, otherwise produce and cache a new one."""
        cached, found = self.cache.get(self.cache_key)
        if found:
            logger.debug("Cache hit", extra={"key": self.cache_key})
            return cached.model_copy(update={"is_from_cache": True}, deep=True)

        try:
            result = self._produce()
        except Exception as exc:
            if self.failure_policy is FailurePolicy.PROPAGATE:
                logger.error(
                    "Feed pipeline failed; propagating",
                    extra={"key": self.cache_key, "error": repr(exc)},
                )
                raise
            logger.error(
                "Feed pipeline failed; returning fail-safe default",
                extra={"key": self.cache_key, "error": repr(exc)},
            )
            return self._fallback()

        self.cache.set(self.cache_key, result, self.ttl_seconds)
        logger.info(
            "Feed result cached",
            extra={"key": self.cache_key, "ttl_seconds": self.ttl_seconds},
        )
        # The stored entry is never handed out; callers get their own copy.
        return result.model_copy(deep=True)
