"""
Adaptive listing engine.

Presents a paginated, filtered view of a remote collection, choosing per
filter combination between backend paging (REMOTE) and fetching the whole
collection once and filtering/paging it locally (LOCAL).

- filters.py: FilterSet value object (normalize, toggle, count_active)
- capabilities.py: per-entity SERVER/LOCAL field classification
- strategy.py: REMOTE vs LOCAL decision and server fingerprint
- paginator.py: remote paging and bounded full-collection fetch
- cache.py: single-entry collection cache
- predicates.py: local filtering and id ordering
- paging.py: page window calculation, ListPage
- stats.py: collection-wide summary counts
- engine.py: the stateful engine tying it all together
"""

from listing_engine.capabilities import Capability, EntityCapability, FieldSpec, MatchKind, classify
from listing_engine.engine import ListingEngine, Notification
from listing_engine.filters import DateRange, FilterSet, count_active, normalize, toggle
from listing_engine.paging import ListPage, slice_page
from listing_engine.repository import ListingRepository, MutationOp, PagedResult
from listing_engine.strategy import Strategy, decide
from listing_engine.tokens import LoadOutcome

__all__ = [
    "Capability",
    "EntityCapability",
    "FieldSpec",
    "MatchKind",
    "classify",
    "ListingEngine",
    "Notification",
    "DateRange",
    "FilterSet",
    "count_active",
    "normalize",
    "toggle",
    "ListPage",
    "slice_page",
    "ListingRepository",
    "MutationOp",
    "PagedResult",
    "Strategy",
    "decide",
    "LoadOutcome",
]
