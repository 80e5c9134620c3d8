"""
Pytest configuration and fixtures for listing engine tests.

The fake repository emulates the backend in memory: it applies server-native
filters the same way the engine would, counts every list_paged call, can fail
on demand and can hold individual responses behind asyncio.Event gates to
reproduce out-of-order completion.
"""

import asyncio
import itertools
from typing import Any

import pytest

from admin_client.screens import ORDERS, PRODUCTS
from listing_engine.capabilities import EntityCapability
from listing_engine.filters import FilterSet
from listing_engine.predicates import apply_filters
from listing_engine.repository import ListingRepository, MutationOp, PagedResult
from shared.config.constants import OrderStatus, PaymentMethod, ShippingMethod, ProductStatus


_id_counter = itertools.count(1000)


def next_id() -> int:
    return next(_id_counter)


class FakeRepository(ListingRepository[dict]):
    """In-memory backend for one entity."""

    def __init__(self, items: list[dict], capability: EntityCapability):
        self.items = [dict(item) for item in items]
        self.capability = capability
        self.entity = capability.entity
        self.calls: list[tuple[int, int, FilterSet]] = []
        self.mutations: list[tuple[MutationOp, dict]] = []
        self.fail_with: Exception | None = None
        self.mutation_error: Exception | None = None
        self._holds: list[asyncio.Event] = []
        self._mutation_holds: list[asyncio.Event] = []

    def hold_next(self) -> asyncio.Event:
        """The next list_paged call waits until the returned event is set."""
        gate = asyncio.Event()
        self._holds.append(gate)
        return gate

    def hold_next_mutation(self) -> asyncio.Event:
        """The next mutate call is applied only once the returned event is set."""
        gate = asyncio.Event()
        self._mutation_holds.append(gate)
        return gate

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def list_paged(self, page: int, page_size: int, server_filters: FilterSet) -> PagedResult[dict]:
        self.calls.append((page, page_size, server_filters))
        snapshot = apply_filters(self.items, server_filters, self.capability)
        if self._holds:
            await self._holds.pop(0).wait()
        else:
            await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        start = (page - 1) * page_size
        items = [dict(item) for item in snapshot[start:start + page_size]]
        return PagedResult(items=items, total=len(snapshot), page=page)

    async def mutate(self, op: MutationOp, payload: dict[str, Any]) -> dict | None:
        self.mutations.append((op, payload))
        if self._mutation_holds:
            await self._mutation_holds.pop(0).wait()
        else:
            await asyncio.sleep(0)
        if self.mutation_error is not None:
            raise self.mutation_error
        if op is MutationOp.CREATE:
            item = {"id": next_id(), **payload}
            self.items.append(item)
            return item
        target = next(item for item in self.items if item["id"] == payload["id"])
        if op is MutationOp.DELETE:
            self.items.remove(target)
            return None
        target.update({k: v for k, v in payload.items() if k != "id"})
        return target


def make_order(order_id: int, estado: str = OrderStatus.DELIVERED, **overrides: Any) -> dict:
    order = {
        "id": order_id,
        "numero": f"PED-{order_id:05d}",
        "estado": estado,
        "metodoPago": PaymentMethod.YAPE,
        "metodoEnvio": ShippingMethod.DELIVERY,
        "total": 100.0 + order_id,
        "creadoEn": f"2024-03-{(order_id % 28) + 1:02d}T10:00:00",
        "usuario": {
            "id": 500 + order_id,
            "nombres": "Cliente",
            "apellidos": f"Número {order_id}",
            "email": f"cliente{order_id}@tienda.pe",
        },
    }
    order.update(overrides)
    return order


def make_orders(count: int, pending: int = 0) -> list[dict]:
    """`count` orders; the first `pending` ids are PENDIENTE, the rest ENTREGADO."""
    return [
        make_order(i, OrderStatus.PENDING if i <= pending else OrderStatus.DELIVERED)
        for i in range(1, count + 1)
    ]


def make_product(product_id: int, **overrides: Any) -> dict:
    product = {
        "id": product_id,
        "nombre": f"Producto {product_id}",
        "sku": f"SKU-{product_id:04d}",
        "descripcion": "Artículo de prueba",
        "estado": ProductStatus.ACTIVE,
        "destacado": False,
        "stock": 20,
        "stockMinimo": 5,
        "categoria": {"id": 1, "nombre": "General"},
        "creadoEn": "2024-01-10T09:00:00",
    }
    product.update(overrides)
    return product


@pytest.fixture
def orders_repo():
    """25 orders, 7 of them PENDIENTE."""
    return FakeRepository(make_orders(25, pending=7), ORDERS)


@pytest.fixture
def products_repo():
    return FakeRepository(
        [
            make_product(1, stock=0),
            make_product(2, stock=3, destacado=True),
            make_product(3, stock=5, stockMinimo=None),
            make_product(4, stock=50, destacado=True, estado=ProductStatus.INACTIVE),
            make_product(5, stock=8, stockMinimo=10, categoria={"id": 2, "nombre": "Bebidas"}),
            make_product(6, stock=0, estado=ProductStatus.SOLD_OUT, categoria={"id": 2, "nombre": "Bebidas"}),
        ],
        PRODUCTS,
    )


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def wait_for_calls(repo: FakeRepository, count: int) -> None:
    """Yield to the event loop until `repo` has received `count` list calls."""
    for _ in range(100):
        if repo.call_count >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} list calls, got {repo.call_count}")


@pytest.fixture
def clock():
    return FakeClock()
