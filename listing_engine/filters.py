"""
Filter State: canonical representation of the user's filter selections.

A FilterSet is an immutable mapping from field name to a normalized value.
Unset fields are simply absent, so two filter sets are equal exactly when
their normalized contents match.

Usage:
    from listing_engine.filters import FilterSet, normalize, toggle

    filters = normalize({"estado": "PENDIENTE", "busqueda": "  "})
    filters = toggle(filters, "estado", "PENDIENTE")  # deselects
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from shared.config.constants import Limits


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive calendar-day range. Either bound may be open.

    Bounds are compared in local time: the lower bound starts at local
    midnight and the upper bound ends at the last instant of that day.
    """

    start: date | None = None
    end: date | None = None

    def __post_init__(self):
        # datetime is a date subclass; keep only the calendar day
        if isinstance(self.start, datetime):
            object.__setattr__(self, "start", self.start.date())
        if isinstance(self.end, datetime):
            object.__setattr__(self, "end", self.end.date())

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None

    @classmethod
    def parse(cls, raw: Any) -> DateRange:
        """Build a range from a DateRange, a (start, end) pair or ISO strings."""
        if isinstance(raw, DateRange):
            return raw
        if isinstance(raw, (tuple, list)) and len(raw) == 2:
            return cls(_parse_day(raw[0]), _parse_day(raw[1]))
        raise TypeError(f"Cannot build a DateRange from {raw!r}")


def _parse_day(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


FilterValue = str | int | float | bool | DateRange


def _normalize_value(value: Any) -> FilterValue | None:
    """
    Normalize one field value. Returns None for anything that means "unset".

    - None, empty and whitespace-only strings are unset
    - strings are stripped and capped at MAX_SEARCH_TERM_LENGTH
    - False is unset (flags are only ever filtered on when switched on)
    - date ranges with both bounds open are unset
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return True if value else None
    if isinstance(value, str):
        value = value.strip()[:Limits.MAX_SEARCH_TERM_LENGTH].rstrip()
        return value or None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, (DateRange, tuple, list)):
        value = DateRange.parse(value)
        return None if value.is_empty else value
    raise TypeError(f"Unsupported filter value: {value!r}")


class FilterSet(Mapping[str, FilterValue]):
    """
    Immutable, hashable set of normalized filter values.

    Only built through normalize(); every stored value is non-empty.
    """

    __slots__ = ("_values", "_hash")

    def __init__(self, values: Mapping[str, FilterValue] | None = None):
        self._values: dict[str, FilterValue] = dict(sorted((values or {}).items()))
        self._hash: int | None = None

    def __getitem__(self, field: str) -> FilterValue:
        return self._values[field]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FilterSet):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == normalize(other)._values
        return NotImplemented

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(tuple(self._values.items()))
        return self._hash

    def __repr__(self) -> str:
        return f"FilterSet({self._values!r})"

    def with_value(self, field: str, value: Any) -> FilterSet:
        """Return a copy with `field` set to `value` (cleared if value is empty)."""
        values = dict(self._values)
        normalized = _normalize_value(value)
        if normalized is None:
            values.pop(field, None)
        else:
            values[field] = normalized
        return FilterSet(values)

    def without(self, field: str) -> FilterSet:
        return self.with_value(field, None)

    def as_query_params(self) -> dict[str, str]:
        """Flatten into backend query parameters. Ranges become `<field>Desde/Hasta`."""
        params: dict[str, str] = {}
        for field, value in self._values.items():
            if isinstance(value, DateRange):
                if value.start is not None:
                    params[f"{field}Desde"] = value.start.isoformat()
                if value.end is not None:
                    params[f"{field}Hasta"] = value.end.isoformat()
            elif isinstance(value, bool):
                params[field] = "true"
            else:
                params[field] = str(value)
        return params


EMPTY_FILTERS = FilterSet()


def normalize(raw: Mapping[str, Any] | None) -> FilterSet:
    """
    Canonicalize raw filter input. Idempotent: normalize(normalize(f)) == normalize(f).
    """
    if isinstance(raw, FilterSet):
        return raw
    values: dict[str, FilterValue] = {}
    for field, value in (raw or {}).items():
        normalized = _normalize_value(value)
        if normalized is not None:
            values[field] = normalized
    return FilterSet(values)


def toggle(filters: FilterSet, field: str, value: Any) -> FilterSet:
    """
    Set `field` to `value`, or clear it if it already holds that value.

    Clicking the same status tile twice deselects it.
    """
    normalized = _normalize_value(value)
    if normalized is None or filters.get(field) == normalized:
        return filters.without(field)
    return filters.with_value(field, normalized)


def count_active(filters: Mapping[str, Any]) -> int:
    """Number of non-empty fields, for the active-filter badge."""
    return len(normalize(filters))


def project(filters: FilterSet, fields: Iterable[str]) -> FilterSet:
    """Keep only the given fields. Used to build the server fingerprint."""
    wanted = set(fields)
    return FilterSet({k: v for k, v in filters.items() if k in wanted})
