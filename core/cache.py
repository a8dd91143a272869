"""
Tagged response cache with explicit invalidation.

Read endpoints store their payloads under a tag (``/tasks``,
``/tasks/{id}``); mutating endpoints call ``invalidate`` with every tag the
mutation makes stale. Entries also expire after a TTL.

In-memory, per process. Replace backing store for multi-worker deployments.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import copy
import logging
import time

from fastapi import Request

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached payload and when it stops being valid."""
    tag: str
    value: Any
    stored_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    invalidations: int = 0
    size: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "invalidations": self.invalidations,
            "size": self.size,
        }


@dataclass
class TagCache:
    """In-memory tag -> payload cache.

    A ``ttl_seconds`` of 0 disables caching entirely: ``set`` is a no-op and
    every ``get`` misses.

    Every tag carries a generation that ``invalidate`` bumps. Readers take
    ``generation(tag)`` before loading a payload and hand it to ``set``; a
    payload loaded before an invalidation of its tag is then discarded
    instead of being cached::

        generation = cache.generation("/tasks")
        tasks = await repository.find_all()
        cache.set("/tasks", tasks, generation=generation)
    """
    ttl_seconds: int = 300
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, CacheEntry] = field(default_factory=dict)
    _generations: dict[str, int] = field(default_factory=dict)
    _stats: CacheStats = field(default_factory=CacheStats)

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def generation(self, tag: str) -> int:
        return self._generations.get(tag, 0)

    def get(self, tag: str) -> Any | None:
        """Return a copy of the payload for ``tag``, or None on miss/expiry."""
        entry = self._entries.get(tag)
        if entry is None:
            self._stats.misses += 1
            return None
        if entry.is_expired(self.clock()):
            del self._entries[tag]
            self._stats.misses += 1
            return None
        self._stats.hits += 1
        return copy.deepcopy(entry.value)

    def set(self, tag: str, value: Any, generation: int | None = None) -> bool:
        """Store ``value`` under ``tag``. Returns False if it was not stored.

        With ``generation``, the write is dropped when ``tag`` has been
        invalidated since that generation was read.
        """
        if not self.enabled:
            return False
        if generation is not None and generation != self.generation(tag):
            logger.debug("Cache write dropped tag=%s (invalidated while loading)", tag)
            return False
        self.cleanup_expired()
        now = self.clock()
        self._entries[tag] = CacheEntry(
            tag=tag,
            value=copy.deepcopy(value),
            stored_at=now,
            expires_at=now + self.ttl_seconds,
        )
        return True

    def invalidate(self, *tags: str) -> int:
        """Mark ``tags`` stale. Returns the number of entries dropped."""
        removed = 0
        for tag in tags:
            self._generations[tag] = self.generation(tag) + 1
            if self._entries.pop(tag, None) is not None:
                removed += 1
        self._stats.invalidations += len(tags)
        logger.debug("Cache invalidated tags=%s removed=%d", list(tags), removed)
        return removed

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns count removed."""
        now = self.clock()
        expired = [k for k, v in self._entries.items() if v.is_expired(now)]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def stats(self) -> CacheStats:
        self._stats.size = len(self._entries)
        return self._stats


def get_cache(request: Request) -> TagCache:
    """FastAPI dependency for the app-wide TagCache."""
    return request.app.state.cache
