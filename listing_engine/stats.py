"""
Statistics Aggregator: collection-wide counts for the summary tiles.

Counts are always computed over the entire unfiltered collection, so they
never reflect the filter currently applied to the list. Only collection
mutations (via refresh) change them. A failure here is isolated from the
list view's own error state.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Generic, TypeVar

from listing_engine.cache import CollectionCache
from listing_engine.filters import EMPTY_FILTERS
from listing_engine.paginator import RemotePaginator, fetch_all
from listing_engine.tokens import LoadOutcome, RequestTokens
from shared.config.logging import bind_logger
from shared.utils.exceptions import FetchFailure

T = TypeVar("T")

StatCounter = Callable[[Mapping[str, Any]], bool]

TOTAL_KEY = "total"


def compute_stats(
    items: Sequence[Mapping[str, Any]],
    counters: Mapping[str, StatCounter],
) -> dict[str, int]:
    """Count `items` once per named counter, plus the overall total."""
    stats = {TOTAL_KEY: len(items)}
    for name, counter in counters.items():
        stats[name] = sum(1 for item in items if counter(item))
    return stats


class StatisticsAggregator(Generic[T]):
    """
    Loads the unfiltered collection and keeps the latest counts.

    Reuses the list view's Collection Cache when it holds a fresh unfiltered
    collection; otherwise fetches on its own and, if the cache is empty,
    seeds it for later LOCAL loads without server filters.
    """

    def __init__(
        self,
        paginator: RemotePaginator[T],
        counters: Mapping[str, StatCounter],
        cache: CollectionCache[T] | None = None,
        bulk_page_size: int = 50,
        max_bulk_pages: int = 200,
    ):
        if TOTAL_KEY in counters:
            raise ValueError(f"'{TOTAL_KEY}' is computed automatically")
        self._paginator = paginator
        self._counters = dict(counters)
        self._cache = cache
        self._bulk_page_size = bulk_page_size
        self._max_bulk_pages = max_bulk_pages
        self._tokens = RequestTokens()
        self._log = bind_logger(__name__, entity=paginator.entity)
        self._stats = compute_stats([], self._counters)
        self.loading = False
        self.error = False

    def current(self) -> dict[str, int]:
        return dict(self._stats)

    async def refresh(self) -> LoadOutcome:
        token = self._tokens.issue()
        self.loading = True

        items = self._cache.get(EMPTY_FILTERS) if self._cache is not None else None
        if items is None:
            generation = self._cache.generation if self._cache is not None else 0
            try:
                result = await fetch_all(
                    self._paginator,
                    EMPTY_FILTERS,
                    page_size=self._bulk_page_size,
                    max_pages=self._max_bulk_pages,
                )
            except FetchFailure:
                if not self._tokens.is_current(token):
                    return LoadOutcome.STALE
                self._log.warning("Statistics load failed, keeping previous counts")
                self.error = True
                self.loading = False
                return LoadOutcome.FAILED

            if not self._tokens.is_current(token):
                self._log.debug("Discarding stale statistics response", token=token)
                return LoadOutcome.STALE
            items = result.items
            if self._cache is not None and self._cache.entry is None:
                self._cache.store(items, EMPTY_FILTERS, generation)

        self._stats = compute_stats(items, self._counters)
        self.error = False
        self.loading = False
        self._log.debug("Statistics refreshed", **self._stats)
        return LoadOutcome.APPLIED
