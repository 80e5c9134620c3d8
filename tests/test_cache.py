"""
Tests for the Collection Cache: fingerprint keying, TTL and generations.
"""

from listing_engine.cache import CollectionCache
from listing_engine.filters import EMPTY_FILTERS, normalize


class TestCollectionCache:
    def test_miss_when_empty(self):
        cache = CollectionCache("pedidos")
        assert cache.get(EMPTY_FILTERS) is None
        assert cache.entry is None

    def test_hit_for_same_fingerprint(self):
        cache = CollectionCache("pedidos")
        fingerprint = normalize({"busqueda": "ana"})
        assert cache.store([{"id": 1}], fingerprint, cache.generation)
        assert cache.get(normalize({"busqueda": " ana "})) == [{"id": 1}]

    def test_miss_for_other_fingerprint(self):
        cache = CollectionCache("pedidos")
        cache.store([{"id": 1}], normalize({"busqueda": "ana"}), cache.generation)
        assert cache.get(EMPTY_FILTERS) is None
        assert cache.get(normalize({"busqueda": "luis"})) is None

    def test_store_replaces_wholesale(self):
        cache = CollectionCache("pedidos")
        cache.store([{"id": 1}, {"id": 2}], EMPTY_FILTERS, cache.generation)
        cache.store([{"id": 3}], normalize({"busqueda": "x"}), cache.generation)
        assert cache.get(EMPTY_FILTERS) is None
        assert cache.entry.items == [{"id": 3}]

    def test_stored_list_is_a_copy(self):
        cache = CollectionCache("pedidos")
        items = [{"id": 1}]
        cache.store(items, EMPTY_FILTERS, cache.generation)
        items.append({"id": 2})
        assert len(cache.get(EMPTY_FILTERS)) == 1

    def test_ttl_expiry(self, clock):
        cache = CollectionCache("productos", ttl_seconds=300, clock=clock)
        cache.store([{"id": 1}], EMPTY_FILTERS, cache.generation)
        clock.advance(299)
        assert cache.get(EMPTY_FILTERS) is not None
        clock.advance(1)
        assert cache.get(EMPTY_FILTERS) is None

    def test_zero_ttl_never_expires(self, clock):
        cache = CollectionCache("productos", ttl_seconds=0, clock=clock)
        cache.store([{"id": 1}], EMPTY_FILTERS, cache.generation)
        clock.advance(10_000)
        assert cache.get(EMPTY_FILTERS) == [{"id": 1}]

    def test_invalidate_clears_and_bumps_generation(self):
        cache = CollectionCache("pedidos")
        cache.store([{"id": 1}], EMPTY_FILTERS, cache.generation)
        cache.invalidate()
        assert cache.entry is None
        assert cache.generation == 1
        assert cache.get(EMPTY_FILTERS) is None

    def test_fetch_started_before_invalidation_is_discarded(self):
        cache = CollectionCache("pedidos")
        generation = cache.generation
        cache.invalidate()
        assert not cache.store([{"id": 1}], EMPTY_FILTERS, generation)
        assert cache.entry is None
        assert cache.store([{"id": 1}], EMPTY_FILTERS, cache.generation)
