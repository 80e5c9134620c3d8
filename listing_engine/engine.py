"""
Adaptive listing engine shared by the pedidos, productos and usuarios screens.

For every filter change the engine decides between backend paging (REMOTE)
and fetching the whole server-filtered collection once and filtering, sorting
and paging it in memory (LOCAL). Summary statistics are loaded independently
and never reflect the active filter.

Every load is stamped with a request token; only the response for the latest
token is committed, so a slow response can never overwrite a newer page.

Usage:
    engine = ListingEngine(OrdersRepository(client), ORDERS, ORDER_STATS)
    await engine.start()
    await engine.toggle_filter("estado", "PENDIENTE")
    page = engine.current_page()
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

from listing_engine.cache import CollectionCache
from listing_engine.capabilities import EntityCapability
from listing_engine.filters import EMPTY_FILTERS, FilterSet, count_active, normalize, toggle
from listing_engine.paginator import RemotePaginator, fetch_all
from listing_engine.paging import ListPage, slice_page, total_pages_for
from listing_engine.predicates import apply_filters, sort_by_id
from listing_engine.repository import ListingRepository, MutationOp
from listing_engine.stats import StatCounter, StatisticsAggregator
from listing_engine.strategy import Strategy, decide, server_fingerprint
from listing_engine.tokens import LoadOutcome, RequestTokens
from shared.config.logging import bind_logger
from shared.config.settings import Settings, settings as default_settings
from shared.utils.exceptions import FetchFailure, MutationFailure

T = TypeVar("T")


@dataclass(frozen=True)
class Notification:
    """Transient, dismissible message for the screen."""

    kind: Literal["success", "error"]
    message: str


class ListingEngine(Generic[T]):
    """
    One visible list view: filters, page cursor, current page and statistics.

    The engine owns its Collection Cache exclusively; it is never shared
    with another screen.
    """

    def __init__(
        self,
        repository: ListingRepository[T],
        capability: EntityCapability,
        counters: Mapping[str, StatCounter] | None = None,
        *,
        page_size: int | None = None,
        bulk_page_size: int | None = None,
        max_bulk_pages: int | None = None,
        cache_ttl_seconds: float | None = None,
        initial_filters: Mapping[str, Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
        app_settings: Settings | None = None,
    ):
        cfg = app_settings or default_settings
        self._repository = repository
        self._capability = capability
        self._page_size = page_size or cfg.list_page_size
        self._bulk_page_size = bulk_page_size or cfg.bulk_page_size
        self._max_bulk_pages = max_bulk_pages or cfg.max_bulk_pages
        if self._page_size < 1 or self._bulk_page_size < 1:
            raise ValueError("Page sizes must be positive")

        ttl = cfg.collection_cache_ttl_seconds if cache_ttl_seconds is None else cache_ttl_seconds
        self._paginator: RemotePaginator[T] = RemotePaginator(repository)
        self._cache: CollectionCache[T] = CollectionCache(capability.entity, ttl, clock)
        self._stats: StatisticsAggregator[T] = StatisticsAggregator(
            self._paginator,
            counters or {},
            cache=self._cache,
            bulk_page_size=self._bulk_page_size,
            max_bulk_pages=self._max_bulk_pages,
        )
        self._tokens = RequestTokens()
        self._log = bind_logger(__name__, entity=capability.entity)

        self._filters: FilterSet = normalize(initial_filters)
        capability.validate(self._filters)
        self._page = 1
        self._strategy = Strategy.REMOTE
        self._list_page: ListPage[T] | None = None
        self._inflight: dict[tuple[FilterSet, int], asyncio.Future[list[T]]] = {}

        self.loading = False
        self.notification: Notification | None = None

    # =========================================================================
    # State
    # =========================================================================

    @property
    def entity(self) -> str:
        return self._capability.entity

    @property
    def capability(self) -> EntityCapability:
        return self._capability

    @property
    def filters(self) -> FilterSet:
        return self._filters

    @property
    def strategy(self) -> Strategy:
        return self._strategy

    @property
    def page(self) -> int:
        return self._page

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def cache(self) -> CollectionCache[T]:
        return self._cache

    @property
    def active_filter_count(self) -> int:
        return count_active(self._filters)

    @property
    def error(self) -> bool:
        return self._list_page is not None and self._list_page.error

    @property
    def stats_error(self) -> bool:
        return self._stats.error

    @property
    def stats_loading(self) -> bool:
        return self._stats.loading

    def current_page(self) -> ListPage[T]:
        if self._list_page is None:
            return ListPage.empty(self._page_size)
        return self._list_page

    def current_stats(self) -> dict[str, int]:
        return self._stats.current()

    def dismiss_notification(self) -> None:
        self.notification = None

    # =========================================================================
    # Commands
    # =========================================================================

    async def start(self, with_stats: bool = True) -> ListPage[T]:
        """Mount: first page and statistics, as independent loads."""
        if with_stats:
            await asyncio.gather(self._load(), self._stats.refresh())
        else:
            await self._load()
        return self.current_page()

    async def refresh_stats(self) -> LoadOutcome:
        return await self._stats.refresh()

    async def set_filter(self, field: str, value: Any) -> ListPage[T]:
        self._capability.spec(field)
        return await self._change_filters(self._filters.with_value(field, value))

    async def toggle_filter(self, field: str, value: Any) -> ListPage[T]:
        self._capability.spec(field)
        return await self._change_filters(toggle(self._filters, field, value))

    async def set_filters(self, raw: Mapping[str, Any]) -> ListPage[T]:
        """Replace the whole filter set at once (e.g. restoring a saved view)."""
        return await self._change_filters(normalize(raw))

    async def clear_filters(self) -> ListPage[T]:
        return await self._change_filters(EMPTY_FILTERS)

    async def go_to_page(self, page: int) -> ListPage[T]:
        """Move the page cursor; filters and cache are left alone."""
        self._page = max(1, page)
        await self._load()
        return self.current_page()

    async def refresh(self) -> ListPage[T]:
        """Invalidate the cache and reload both the page and the statistics."""
        self._cache.invalidate()
        await asyncio.gather(self._load(), self._stats.refresh())
        return self.current_page()

    async def mutate(self, op: MutationOp, payload: dict[str, Any]) -> T | None:
        """
        Run a create/update/delete/status change, then reload.

        The cache is invalidated before the request is sent and again once it
        succeeds. Only a successful mutation triggers the page and statistics
        reloads.

        Raises:
            MutationFailure: The backend rejected or never received the change
        """
        self._cache.invalidate()
        try:
            result = await self._repository.mutate(op, payload)
        except MutationFailure:
            self.notification = Notification("error", f"Error al actualizar {self.entity}")
            raise
        except Exception as exc:
            self.notification = Notification("error", f"Error al actualizar {self.entity}")
            raise MutationFailure(self.entity, op.value, str(exc) or type(exc).__name__) from exc

        # Loads started while the request was in flight saw the old collection
        self._cache.invalidate()
        self.notification = Notification("success", f"Cambios guardados en {self.entity}")
        await asyncio.gather(self._load(), self._stats.refresh())
        return result

    # =========================================================================
    # Loading
    # =========================================================================

    async def _change_filters(self, filters: FilterSet) -> ListPage[T]:
        self._capability.validate(filters)
        if filters == self._filters:
            return self.current_page()
        self._filters = filters
        self._page = 1
        await self._load()
        return self.current_page()

    async def _load(self) -> LoadOutcome:
        token = self._tokens.issue()
        filters, page = self._filters, self._page

        strategy = decide(filters, self._capability)
        if strategy is not self._strategy:
            self._log.info("Listing strategy changed", previous=self._strategy.value, strategy=strategy.value)
        self._strategy = strategy
        self.loading = True

        try:
            if strategy is Strategy.REMOTE:
                list_page = await self._load_remote(filters, page, token)
            else:
                list_page = await self._load_local(filters, page, token)
        except FetchFailure:
            if not self._tokens.is_current(token):
                return LoadOutcome.STALE
            self._fail()
            return LoadOutcome.FAILED

        if list_page is None:
            self._log.debug("Discarding stale list response", token=token)
            return LoadOutcome.STALE

        self._list_page = list_page
        self._page = list_page.page
        self.loading = False
        return LoadOutcome.APPLIED

    async def _load_remote(self, filters: FilterSet, page: int, token: int) -> ListPage[T] | None:
        server_filters = server_fingerprint(filters, self._capability)
        result = await self._paginator.fetch_page(page, self._page_size, server_filters)
        if not self._tokens.is_current(token):
            return None

        total_pages = total_pages_for(result.total, self._page_size)
        if page > total_pages:
            # The collection shrank under the cursor; ask for the last page instead
            self._log.debug("Clamping remote page", page=page, total_pages=total_pages)
            page = total_pages
            result = await self._paginator.fetch_page(page, self._page_size, server_filters)
            if not self._tokens.is_current(token):
                return None
            total_pages = total_pages_for(result.total, self._page_size)

        items = sort_by_id(result.items, self._capability.id_attribute)[:self._page_size]
        return ListPage(
            items=items,
            page=min(page, total_pages),
            page_size=self._page_size,
            total=result.total,
            total_pages=total_pages,
        )

    async def _load_local(self, filters: FilterSet, page: int, token: int) -> ListPage[T] | None:
        fingerprint = server_fingerprint(filters, self._capability)
        items = self._cache.get(fingerprint)
        if items is None:
            items = await asyncio.shield(self._collection(fingerprint))
            if not self._tokens.is_current(token):
                return None

        filtered = apply_filters(items, filters, self._capability)
        window = slice_page(filtered, page, self._page_size)
        return ListPage.from_window(window, self._page_size)

    def _collection(self, fingerprint: FilterSet) -> asyncio.Future[list[T]]:
        """
        Full fetch for `fingerprint`, shared by every load that misses the
        cache at the same generation.

        The result is stored even when the load that started it has been
        superseded, as long as the view is still LOCAL on the same fingerprint.
        """
        key = (fingerprint, self._cache.generation)
        task = self._inflight.get(key)
        if task is not None:
            return task

        async def fetch() -> list[T]:
            result = await fetch_all(
                self._paginator,
                fingerprint,
                page_size=self._bulk_page_size,
                max_pages=self._max_bulk_pages,
            )
            if self._still_local(fingerprint):
                self._cache.store(result.items, fingerprint, key[1])
            return result.items

        task = asyncio.ensure_future(fetch())
        self._inflight[key] = task
        task.add_done_callback(lambda done: self._inflight.pop(key, None))
        return task

    def _still_local(self, fingerprint: FilterSet) -> bool:
        return (
            decide(self._filters, self._capability) is Strategy.LOCAL
            and server_fingerprint(self._filters, self._capability) == fingerprint
        )

    def _fail(self) -> None:
        previous = self._list_page
        if previous is not None:
            self._list_page = previous.with_error()
            self._page = previous.page
        else:
            self._list_page = ListPage.empty(self._page_size, error=True)
        self.notification = Notification("error", f"Error al cargar {self.entity}")
        self.loading = False
