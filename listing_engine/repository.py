"""
Repository contract consumed by the listing engine.

Each admin screen provides one implementation backed by its REST client.
Entities are plain mappings (decoded JSON); the engine never needs their
schema beyond the attributes named in the screen's capability configuration.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from listing_engine.filters import FilterSet

T = TypeVar("T")


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    """One backend page."""

    items: list[T]
    total: int
    page: int


@dataclass(frozen=True)
class CollectionResult(Generic[T]):
    """The whole (server-filtered) collection."""

    items: list[T] = field(default_factory=list)
    total: int = 0


class MutationOp(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CHANGE_STATUS = "change_status"


class ListingRepository(ABC, Generic[T]):
    """
    Abstract backend client for one list screen.

    Subclasses must implement:
    - list_paged(): one backend page for server-native filters
    - mutate(): create/update/delete/change status

    Backends that offer a bulk endpoint set has_bulk_endpoint and override
    list_all(); otherwise the engine synthesizes it from list_paged().
    """

    entity: str = "entidad"
    has_bulk_endpoint: bool = False

    @abstractmethod
    async def list_paged(
        self,
        page: int,
        page_size: int,
        server_filters: FilterSet,
    ) -> PagedResult[T]:
        ...

    async def list_all(self, server_filters: FilterSet) -> CollectionResult[T]:
        raise NotImplementedError(f"{type(self).__name__} has no bulk endpoint")

    @abstractmethod
    async def mutate(self, op: MutationOp, payload: dict[str, Any]) -> T | None:
        ...
