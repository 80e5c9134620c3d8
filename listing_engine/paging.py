"""
Page Window Calculator and the ListPage value handed to the renderer.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


def total_pages_for(total: int, page_size: int) -> int:
    """Number of pages for `total` items; an empty result still has one page."""
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return max(1, math.ceil(max(0, total) / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp `page` into [1, max(1, total_pages)]."""
    return min(max(1, page), max(1, total_pages))


@dataclass(frozen=True)
class PageWindow(Generic[T]):
    """Result of slicing an in-memory list."""

    items: list[T]
    page: int
    total_pages: int
    total: int


def slice_page(items: Sequence[T], page: int, page_size: int) -> PageWindow[T]:
    """
    Cut the visible slice out of `items`, clamping out-of-range pages.

    Must be re-run whenever len(items) changes so a page number left over
    from a larger result never points past the end.
    """
    total = len(items)
    pages = total_pages_for(total, page_size)
    clamped = clamp_page(page, pages)
    start = (clamped - 1) * page_size
    return PageWindow(
        items=list(items[start:start + page_size]),
        page=clamped,
        total_pages=pages,
        total=total,
    )


@dataclass(frozen=True)
class ListPage(Generic[T]):
    """
    The page currently shown by a list screen.

    Invariants: len(items) <= page_size, 1 <= page <= total_pages and
    total_pages == max(1, ceil(total / page_size)).
    """

    items: list[T] = field(default_factory=list)
    page: int = 1
    page_size: int = 10
    total: int = 0
    total_pages: int = 1
    error: bool = False

    @classmethod
    def empty(cls, page_size: int, error: bool = False) -> ListPage[T]:
        return cls(items=[], page=1, page_size=page_size, total=0, total_pages=1, error=error)

    @classmethod
    def from_window(cls, window: PageWindow[T], page_size: int) -> ListPage[T]:
        return cls(
            items=window.items,
            page=window.page,
            page_size=page_size,
            total=window.total,
            total_pages=window.total_pages,
        )

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def with_error(self) -> ListPage[T]:
        return ListPage(
            items=self.items,
            page=self.page,
            page_size=self.page_size,
            total=self.total,
            total_pages=self.total_pages,
            error=True,
        )

    def to_dict(self) -> dict:
        """Pagination metadata in the backend's response shape."""
        return {
            "page": self.page,
            "limit": self.page_size,
            "total": self.total,
            "pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }
