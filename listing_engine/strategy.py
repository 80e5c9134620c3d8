"""
Strategy Selector: REMOTE (backend paging) or LOCAL (client-side paging).

The strategy is a pure function of the filter set and the screen's
capability configuration; it is never set directly.
"""

from __future__ import annotations

from enum import Enum

from listing_engine.capabilities import EntityCapability
from listing_engine.filters import FilterSet, project


class Strategy(str, Enum):
    REMOTE = "REMOTE"
    LOCAL = "LOCAL"


def decide(filters: FilterSet, capability: EntityCapability) -> Strategy:
    """LOCAL if any local-only field is set, else REMOTE."""
    capability.validate(filters)
    local_fields = capability.local_fields
    if any(name in local_fields for name in filters):
        return Strategy.LOCAL
    return Strategy.REMOTE


def server_fingerprint(filters: FilterSet, capability: EntityCapability) -> FilterSet:
    """The server-native subset of `filters`; keys the Collection Cache."""
    return project(filters, capability.server_fields)
