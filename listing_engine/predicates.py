"""
Client-side filtering for the LOCAL strategy.

Predicates run in a fixed order so results are reproducible:

1. exact-match fields (status/category/type)
2. boolean flags
3. derived bands (stock levels, account state)
4. inclusive date ranges
5. free-text search, OR across the field's attributes

Every group is ANDed with the others. The result is then sorted by entity
id ascending so page boundaries never shift between renders.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, time
from typing import Any

from listing_engine.capabilities import MATCH_ORDER, EntityCapability, FieldSpec, MatchKind
from listing_engine.filters import DateRange, FilterSet, FilterValue

Entity = Mapping[str, Any]

_MISSING = object()


def resolve(entity: Any, path: str) -> Any:
    """
    Read a dotted attribute path from a mapping or object.

    Returns None when any step along the path is missing.
    """
    current = entity
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return None
    return current


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an entity timestamp into naive local time.

    Accepts datetimes and ISO 8601 strings (including a trailing 'Z').
    Aware values are converted to the local timezone first.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


# =============================================================================
# Single-field matchers
# =============================================================================


def _match_exact(entity: Entity, spec: FieldSpec, value: FilterValue) -> bool:
    actual = resolve(entity, spec.path)
    if actual is None:
        return False
    if isinstance(value, bool):
        return actual is value
    # Select widgets hand over strings; ids on entities are ints
    return str(actual) == str(value)


def _match_flag(entity: Entity, spec: FieldSpec, value: FilterValue) -> bool:
    return bool(resolve(entity, spec.path))


def _match_band(entity: Entity, spec: FieldSpec, value: FilterValue) -> bool:
    return spec.band(entity, str(value))


def _match_date_range(entity: Entity, spec: FieldSpec, value: FilterValue) -> bool:
    if not isinstance(value, DateRange):
        return False
    moment = parse_timestamp(resolve(entity, spec.path))
    if moment is None:
        return False
    if value.start is not None and moment < datetime.combine(value.start, time.min):
        return False
    if value.end is not None and moment > datetime.combine(value.end, time.max):
        return False
    return True


def _match_search(entity: Entity, spec: FieldSpec, value: FilterValue) -> bool:
    needle = str(value).lower()
    for attribute in spec.search_attributes:
        haystack = resolve(entity, attribute)
        if haystack is not None and needle in str(haystack).lower():
            return True
    return False


_MATCHERS: dict[MatchKind, Callable[[Entity, FieldSpec, FilterValue], bool]] = {
    MatchKind.EXACT: _match_exact,
    MatchKind.FLAG: _match_flag,
    MatchKind.BAND: _match_band,
    MatchKind.DATE_RANGE: _match_date_range,
    MatchKind.SEARCH: _match_search,
}


# =============================================================================
# Public API
# =============================================================================


def build_predicate(
    filters: FilterSet,
    capability: EntityCapability,
) -> Callable[[Entity], bool]:
    """Compile `filters` into one predicate with the fixed evaluation order."""
    capability.validate(filters)
    checks: list[tuple[FieldSpec, FilterValue]] = []
    for kind in MATCH_ORDER:
        for name, value in filters.items():
            spec = capability.fields[name]
            if spec.match is kind:
                checks.append((spec, value))

    def predicate(entity: Entity) -> bool:
        return all(_MATCHERS[spec.match](entity, spec, value) for spec, value in checks)

    return predicate


def sort_by_id(items: Sequence[Entity], id_attribute: str = "id") -> list[Entity]:
    """Stable ascending sort by id; entities without one go last."""
    def key(entity: Entity) -> tuple[int, Any]:
        entity_id = resolve(entity, id_attribute)
        return (1, 0) if entity_id is None else (0, entity_id)

    return sorted(items, key=key)


def apply_filters(
    items: Sequence[Entity],
    filters: FilterSet,
    capability: EntityCapability,
) -> list[Entity]:
    """Filter the full collection and sort it by id for paging."""
    predicate = build_predicate(filters, capability)
    return sort_by_id([item for item in items if predicate(item)], capability.id_attribute)
