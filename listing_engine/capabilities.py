"""
Capability Classifier: static per-entity filter configuration.

Each list screen declares, for every filter field, whether the backend can
evaluate it during a paginated query (SERVER) or whether it can only be
evaluated once the whole collection is in memory (LOCAL), and how the field
is matched against an entity when it is evaluated locally.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from shared.utils.exceptions import UnknownFilterFieldError


class Capability(str, Enum):
    """Where a filter field can be evaluated."""

    SERVER = "SERVER"
    LOCAL = "LOCAL"


class MatchKind(str, Enum):
    """
    How a field is matched locally. Declaration order is evaluation order.
    """

    EXACT = "EXACT"  # status/category/type equality
    FLAG = "FLAG"  # boolean flag must be truthy
    BAND = "BAND"  # derived band (stock levels, account state)
    DATE_RANGE = "DATE_RANGE"  # inclusive calendar-day range
    SEARCH = "SEARCH"  # case-insensitive substring across several attributes


MATCH_ORDER: tuple[MatchKind, ...] = tuple(MatchKind)


# A band predicate receives the entity and the selected band value.
BandPredicate = Callable[[Mapping[str, Any], str], bool]


@dataclass(frozen=True)
class FieldSpec:
    """
    One filterable field.

    Attributes:
        name: Filter field name, also the backend query parameter name
        capability: SERVER or LOCAL
        match: How the field is matched when evaluated locally
        attribute: Dotted path of the entity attribute (defaults to name)
        search_attributes: Attributes searched by a SEARCH field
        band: Predicate implementing a BAND field
    """

    name: str
    capability: Capability
    match: MatchKind = MatchKind.EXACT
    attribute: str | None = None
    search_attributes: tuple[str, ...] = ()
    band: BandPredicate | None = None

    def __post_init__(self):
        if self.match is MatchKind.SEARCH and not self.search_attributes:
            raise ValueError(f"Search field '{self.name}' needs search_attributes")
        if self.match is MatchKind.BAND and self.band is None:
            raise ValueError(f"Band field '{self.name}' needs a band predicate")

    @property
    def path(self) -> str:
        return self.attribute or self.name


@dataclass(frozen=True)
class EntityCapability:
    """
    Filter configuration of one list screen.

    Usage:
        PRODUCTS = EntityCapability.build("productos", [
            FieldSpec("busqueda", Capability.SERVER, MatchKind.SEARCH,
                      search_attributes=("nombre", "sku")),
            FieldSpec("destacado", Capability.LOCAL, MatchKind.FLAG),
        ])
    """

    entity: str
    fields: Mapping[str, FieldSpec] = field(default_factory=dict)
    id_attribute: str = "id"

    @classmethod
    def build(
        cls,
        entity: str,
        specs: Iterable[FieldSpec],
        id_attribute: str = "id",
    ) -> EntityCapability:
        fields: dict[str, FieldSpec] = {}
        for spec in specs:
            if spec.name in fields:
                raise ValueError(f"Duplicate filter field '{spec.name}' for {entity}")
            fields[spec.name] = spec
        return cls(entity=entity, fields=fields, id_attribute=id_attribute)

    @property
    def server_fields(self) -> frozenset[str]:
        return frozenset(
            name for name, spec in self.fields.items()
            if spec.capability is Capability.SERVER
        )

    @property
    def local_fields(self) -> frozenset[str]:
        return frozenset(
            name for name, spec in self.fields.items()
            if spec.capability is Capability.LOCAL
        )

    def spec(self, field_name: str) -> FieldSpec:
        try:
            return self.fields[field_name]
        except KeyError:
            raise UnknownFilterFieldError(self.entity, field_name) from None

    def classify(self, field_name: str) -> Capability:
        return self.spec(field_name).capability

    def validate(self, filters: Iterable[str]) -> None:
        """Raise UnknownFilterFieldError for the first undeclared field."""
        for name in filters:
            self.spec(name)


# =============================================================================
# Registry
# =============================================================================


_registry: dict[str, EntityCapability] = {}


def register(capability: EntityCapability) -> EntityCapability:
    """Register a screen configuration so it can be looked up by entity name."""
    _registry[capability.entity] = capability
    return capability


def get_capability(entity: str) -> EntityCapability:
    try:
        return _registry[entity]
    except KeyError:
        raise KeyError(f"No capability configuration registered for '{entity}'") from None


def classify(entity: str, field_name: str) -> Capability:
    """Static lookup: can the backend evaluate `field_name` for `entity`?"""
    return get_capability(entity).classify(field_name)
