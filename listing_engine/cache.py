"""
Collection Cache: the full server-filtered collection for the LOCAL strategy.

Holds at most one collection, keyed by the server fingerprint it was fetched
with. It is replaced wholesale, never patched. Any mutation invalidates it
unconditionally; each invalidation bumps a generation counter so a fetch that
started before the invalidation can never repopulate it.

Freshness:
    An entry is served only while its fingerprint matches the caller's and it
    is younger than the TTL (0 disables expiry).
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generic, TypeVar

from listing_engine.filters import FilterSet
from shared.config.logging import bind_logger

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    items: list[T]
    fingerprint: FilterSet
    fetched_at: datetime
    fetched_at_monotonic: float
    generation: int


class CollectionCache(Generic[T]):
    """
    Single-entry cache owned by exactly one list view.

    Usage:
        generation = cache.generation
        result = await fetch_all(...)
        cache.store(result.items, fingerprint, generation)
        items = cache.get(fingerprint)
    """

    def __init__(
        self,
        entity: str,
        ttl_seconds: float = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._log = bind_logger(__name__, entity=entity)
        self._ttl = ttl_seconds
        self._clock = clock
        self._entry: CacheEntry[T] | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def entry(self) -> CacheEntry[T] | None:
        return self._entry

    def is_fresh(self, entry: CacheEntry[T]) -> bool:
        if self._ttl <= 0:
            return True
        return self._clock() - entry.fetched_at_monotonic < self._ttl

    def is_valid_for(self, fingerprint: FilterSet) -> bool:
        entry = self._entry
        return (
            entry is not None
            and entry.generation == self._generation
            and entry.fingerprint == fingerprint
            and self.is_fresh(entry)
        )

    def get(self, fingerprint: FilterSet) -> list[T] | None:
        """Cached items for `fingerprint`, or None on a miss."""
        if self.is_valid_for(fingerprint):
            self._log.debug("Collection cache hit", fingerprint=dict(fingerprint))
            return self._entry.items
        self._log.debug("Collection cache miss", fingerprint=dict(fingerprint))
        return None

    def store(self, items: list[T], fingerprint: FilterSet, generation: int) -> bool:
        """
        Replace the cached collection.

        Args:
            items: The full server-filtered collection
            fingerprint: Server-native filters the collection was fetched with
            generation: Value of `generation` read before the fetch started

        Returns:
            False (and nothing stored) if the cache was invalidated meanwhile
        """
        if generation != self._generation:
            self._log.debug(
                "Discarding collection fetched before invalidation",
                generation=generation,
                current_generation=self._generation,
            )
            return False
        self._entry = CacheEntry(
            items=list(items),
            fingerprint=fingerprint,
            fetched_at=datetime.now(timezone.utc),
            fetched_at_monotonic=self._clock(),
            generation=generation,
        )
        return True

    def invalidate(self) -> None:
        self._generation += 1
        if self._entry is not None:
            self._log.debug("Collection cache invalidated", generation=self._generation)
        self._entry = None
