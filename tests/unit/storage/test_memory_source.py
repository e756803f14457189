"""Tests for the in-process queryable source."""

import pytest

from entity_repository.protocols import QueryableSource
from entity_repository.query.ordering import compose_ordering
from entity_repository.query.predicates import Predicate, compose_predicate
from entity_repository.schemas.pagination import SortDescriptor
from entity_repository.storage import MemorySource
from tests.mocks.products import PRODUCTS_OUT_OF_STOCK, Product


class TestMemorySource:
    """Tests for MemorySource composition and execution."""

    def test_satisfies_protocol(self, memory_source):
        assert isinstance(memory_source, QueryableSource)

    def test_snapshot_ignores_later_changes(self, products):
        source = MemorySource(products)
        products.clear()

        assert len(source) == 20

    def test_universal_predicate_returns_same_source(self, memory_source):
        assert memory_source.where(Predicate()) is memory_source

    @pytest.mark.asyncio
    async def test_where_filters(self, memory_source):
        predicate = compose_predicate(
            Product, {"in_stock": {"operator": "equals", "value": False}}
        )

        filtered = memory_source.where(predicate)

        assert await filtered.count() == PRODUCTS_OUT_OF_STOCK
        assert await memory_source.count() == 20

    @pytest.mark.asyncio
    async def test_order_then_slice(self, memory_source):
        ordering = compose_ordering(Product, SortDescriptor(field="price"))

        page = await memory_source.order_by(ordering).slice(3, 2).fetch()

        assert [p.id for p in page] == [4, 5]

    @pytest.mark.asyncio
    async def test_slice_beyond_end_is_empty(self, memory_source):
        assert await memory_source.slice(40, 10).fetch() == []

    @pytest.mark.asyncio
    async def test_fetch_keeps_natural_order(self, memory_source, shuffled_products):
        records = await memory_source.fetch()

        assert [p.id for p in records] == [p.id for p in shuffled_products]
