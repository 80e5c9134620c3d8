"""
Remote Paginator and the bounded page iterator behind full-collection fetches.

Usage:
    paginator = RemotePaginator(repository)
    page = await paginator.fetch_page(1, 10, server_filters)

    items = await fetch_all(paginator, server_filters, page_size=50, max_pages=200)
"""

from __future__ import annotations

import math
from typing import Generic, TypeVar

from listing_engine.filters import FilterSet
from listing_engine.repository import CollectionResult, ListingRepository, PagedResult
from shared.config.logging import get_logger
from shared.utils.exceptions import (
    FetchFailure,
    MalformedResponseError,
    PaginationBoundExceeded,
)

T = TypeVar("T")

logger = get_logger(__name__)


class RemotePaginator(Generic[T]):
    """
    Issues one backend request per page turn.

    Every failure leaves this class as a FetchFailure, so callers only
    have one error type to handle at the engine boundary.
    """

    def __init__(self, repository: ListingRepository[T]):
        self._repository = repository

    @property
    def repository(self) -> ListingRepository[T]:
        return self._repository

    @property
    def entity(self) -> str:
        return self._repository.entity

    async def fetch_page(
        self,
        page: int,
        page_size: int,
        server_filters: FilterSet,
    ) -> PagedResult[T]:
        try:
            result = await self._repository.list_paged(page, page_size, server_filters)
        except FetchFailure:
            raise
        except Exception as exc:
            raise FetchFailure(self.entity, str(exc) or type(exc).__name__, page=page) from exc

        if result.total < 0:
            raise MalformedResponseError(self.entity, f"total negativo: {result.total}", page=page)
        return result


class PageIterator(Generic[T]):
    """
    Finite, non-restartable sequence of backend pages.

    Starts at page 1 and continues while the current page is below
    ceil(total / page_size), using the latest total reported. An empty
    page or a zero total ends the sequence immediately. Once exhausted it
    stays exhausted; build a new iterator to fetch again.

    Usage:
        async for page in PageIterator(paginator, filters, page_size=50):
            items.extend(page.items)
    """

    def __init__(
        self,
        paginator: RemotePaginator[T],
        server_filters: FilterSet,
        page_size: int,
        max_pages: int,
    ):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._paginator = paginator
        self._filters = server_filters
        self._page_size = page_size
        self._max_pages = max_pages
        self._next = 1
        self._done = False

    @property
    def pages_fetched(self) -> int:
        return self._next - 1

    @property
    def exhausted(self) -> bool:
        return self._done

    def __aiter__(self) -> PageIterator[T]:
        return self

    async def __anext__(self) -> PagedResult[T]:
        page = await self.next_page()
        if page is None:
            raise StopAsyncIteration
        return page

    async def next_page(self) -> PagedResult[T] | None:
        """Fetch the next page, or return None once the sequence is done."""
        if self._done:
            return None
        if self._next > self._max_pages:
            self._done = True
            raise PaginationBoundExceeded(self._paginator.entity, self._max_pages)

        try:
            result = await self._paginator.fetch_page(self._next, self._page_size, self._filters)
        except FetchFailure:
            self._done = True
            raise
        self._next += 1

        total_pages = math.ceil(result.total / self._page_size) if result.total > 0 else 0
        if not result.items or total_pages == 0:
            self._done = True
            if not result.items:
                return None
        elif self._next > total_pages:
            self._done = True
        return result


async def fetch_all(
    paginator: RemotePaginator[T],
    server_filters: FilterSet,
    page_size: int,
    max_pages: int,
) -> CollectionResult[T]:
    """
    Materialize the whole server-filtered collection into one list.

    Uses the repository's bulk endpoint when it has one; otherwise drains a
    PageIterator. Downstream filtering needs random access, hence the list.
    """
    repository = paginator.repository
    if repository.has_bulk_endpoint:
        try:
            return await repository.list_all(server_filters)
        except FetchFailure:
            raise
        except Exception as exc:
            raise FetchFailure(paginator.entity, str(exc) or type(exc).__name__) from exc

    items: list[T] = []
    pages = PageIterator(paginator, server_filters, page_size, max_pages)
    async for page in pages:
        items.extend(page.items)

    logger.info(
        "Full collection fetched",
        entity=paginator.entity,
        pages=pages.pages_fetched,
        items=len(items),
        server_filters=dict(server_filters),
    )
    return CollectionResult(items=items, total=len(items))
