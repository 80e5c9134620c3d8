"""
Tests for the Remote Paginator and the bounded page iterator.
"""

import pytest

from admin_client.screens import ORDERS
from listing_engine.filters import EMPTY_FILTERS, normalize
from listing_engine.paginator import PageIterator, RemotePaginator, fetch_all
from listing_engine.repository import CollectionResult, ListingRepository, PagedResult
from shared.utils.exceptions import (
    FetchFailure,
    MalformedResponseError,
    PaginationBoundExceeded,
)
from tests.conftest import FakeRepository, make_orders


class NegativeTotalRepository(ListingRepository[dict]):
    entity = "pedidos"

    async def list_paged(self, page, page_size, server_filters):
        return PagedResult(items=[], total=-1, page=page)

    async def mutate(self, op, payload):
        return None


class BulkRepository(FakeRepository):
    has_bulk_endpoint = True

    def __init__(self, items):
        super().__init__(items, ORDERS)
        self.bulk_calls = 0

    async def list_all(self, server_filters):
        self.bulk_calls += 1
        return CollectionResult(items=list(self.items), total=len(self.items))


class TestFetchPage:
    @pytest.mark.asyncio
    async def test_returns_backend_page(self, orders_repo):
        paginator = RemotePaginator(orders_repo)
        result = await paginator.fetch_page(2, 10, EMPTY_FILTERS)
        assert [o["id"] for o in result.items] == list(range(11, 21))
        assert result.total == 25
        assert orders_repo.calls == [(2, 10, EMPTY_FILTERS)]

    @pytest.mark.asyncio
    async def test_passes_server_filters(self, orders_repo):
        paginator = RemotePaginator(orders_repo)
        result = await paginator.fetch_page(1, 10, normalize({"busqueda": "PED-00012"}))
        assert [o["id"] for o in result.items] == [12]
        assert result.total == 1

    @pytest.mark.asyncio
    async def test_any_error_becomes_fetch_failure(self, orders_repo):
        orders_repo.fail_with = ConnectionError("Connection refused")
        with pytest.raises(FetchFailure) as exc_info:
            await RemotePaginator(orders_repo).fetch_page(1, 10, EMPTY_FILTERS)
        assert exc_info.value.entity == "pedidos"
        assert "Connection refused" in exc_info.value.detail
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_negative_total_is_malformed(self):
        with pytest.raises(MalformedResponseError):
            await RemotePaginator(NegativeTotalRepository()).fetch_page(1, 10, EMPTY_FILTERS)


class TestPageIterator:
    @pytest.mark.asyncio
    async def test_walks_every_page_once(self, orders_repo):
        pages = PageIterator(RemotePaginator(orders_repo), EMPTY_FILTERS, page_size=10, max_pages=200)
        collected = [page async for page in pages]
        assert [p.page for p in collected] == [1, 2, 3]
        assert [c[0] for c in orders_repo.calls] == [1, 2, 3]
        assert pages.pages_fetched == 3
        assert pages.exhausted

    @pytest.mark.asyncio
    async def test_is_not_restartable(self, orders_repo):
        pages = PageIterator(RemotePaginator(orders_repo), EMPTY_FILTERS, page_size=50, max_pages=200)
        assert len([page async for page in pages]) == 1
        assert await pages.next_page() is None
        assert orders_repo.call_count == 1

    @pytest.mark.asyncio
    async def test_empty_collection_stops_after_first_request(self):
        repo = FakeRepository([], ORDERS)
        pages = PageIterator(RemotePaginator(repo), EMPTY_FILTERS, page_size=50, max_pages=200)
        assert [page async for page in pages] == []
        assert repo.call_count == 1

    @pytest.mark.asyncio
    async def test_exact_multiple_of_page_size(self):
        repo = FakeRepository(make_orders(20), ORDERS)
        pages = PageIterator(RemotePaginator(repo), EMPTY_FILTERS, page_size=10, max_pages=200)
        assert len([page async for page in pages]) == 2
        assert repo.call_count == 2

    @pytest.mark.asyncio
    async def test_bound_exceeded(self, orders_repo):
        pages = PageIterator(RemotePaginator(orders_repo), EMPTY_FILTERS, page_size=10, max_pages=2)
        with pytest.raises(PaginationBoundExceeded) as exc_info:
            async for _ in pages:
                pass
        assert exc_info.value.max_pages == 2
        assert orders_repo.call_count == 2

    @pytest.mark.asyncio
    async def test_failure_ends_iteration(self, orders_repo):
        orders_repo.fail_with = RuntimeError("boom")
        pages = PageIterator(RemotePaginator(orders_repo), EMPTY_FILTERS, page_size=10, max_pages=200)
        with pytest.raises(FetchFailure):
            await pages.next_page()
        assert pages.exhausted
        assert await pages.next_page() is None

    def test_page_size_must_be_positive(self, orders_repo):
        with pytest.raises(ValueError):
            PageIterator(RemotePaginator(orders_repo), EMPTY_FILTERS, page_size=0, max_pages=1)


class TestFetchAll:
    @pytest.mark.asyncio
    async def test_concatenates_pages(self, orders_repo):
        result = await fetch_all(RemotePaginator(orders_repo), EMPTY_FILTERS, page_size=10, max_pages=200)
        assert result.total == 25
        assert [o["id"] for o in result.items] == list(range(1, 26))

    @pytest.mark.asyncio
    async def test_uses_bulk_endpoint_when_available(self):
        repo = BulkRepository(make_orders(120))
        result = await fetch_all(RemotePaginator(repo), EMPTY_FILTERS, page_size=50, max_pages=200)
        assert result.total == 120
        assert repo.bulk_calls == 1
        assert repo.call_count == 0
