"""Tests for order composition."""

from datetime import datetime
from decimal import Decimal

import pytest

from entity_repository.constants import SortDirection
from entity_repository.exceptions import UnknownFieldError
from entity_repository.query.ordering import Ordering, compose_ordering
from entity_repository.schemas.pagination import SortDescriptor
from tests.mocks.products import Product


class TestComposeOrdering:
    """Tests for compose_ordering."""

    def test_no_descriptor_means_no_ordering(self):
        assert compose_ordering(Product, None) is None

    def test_descriptor_without_field_means_no_ordering(self):
        assert compose_ordering(Product, SortDescriptor()) is None

    def test_ordering_carries_field_and_direction(self):
        ordering = compose_ordering(
            Product, SortDescriptor(field="price", direction="desc")
        )

        assert isinstance(ordering, Ordering)
        assert ordering.field.name == "price"
        assert ordering.descending

    def test_unknown_sort_field_raises(self):
        with pytest.raises(UnknownFieldError):
            compose_ordering(Product, SortDescriptor(field="rating"))


class TestOrderingSort:
    """Tests for in-process sorting."""

    def test_ascending_by_price(self, shuffled_products):
        ordering = compose_ordering(Product, SortDescriptor(field="price"))

        prices = [p.price for p in ordering.sort(shuffled_products)]

        assert prices == sorted(prices)
        assert prices[0] == Decimal("25.00")

    def test_descending_by_price(self, shuffled_products):
        ordering = compose_ordering(
            Product,
            SortDescriptor(field="price", direction=SortDirection.DESC),
        )

        prices = [p.price for p in ordering.sort(shuffled_products)]

        assert prices == sorted(prices, reverse=True)

    def test_nulls_first_ascending(self, products):
        ordering = compose_ordering(Product, SortDescriptor(field="released_on"))

        ordered = ordering.sort(products)

        assert all(p.released_on is None for p in ordered[:8])
        assert ordered[8].released_on is not None

    def test_nulls_last_descending(self, products):
        ordering = compose_ordering(
            Product, SortDescriptor(field="released_on", direction="descending")
        )

        ordered = ordering.sort(products)

        assert all(p.released_on is None for p in ordered[-8:])
        assert ordered[0].name == "Workstation"

    def test_sort_is_stable_for_equal_keys(self, products):
        """Test records with equal keys keep their source order."""
        ordering = compose_ordering(Product, SortDescriptor(field="in_stock"))

        out_of_stock = [p.id for p in ordering.sort(products) if not p.in_stock]

        assert out_of_stock == [4, 7, 12, 16]


    def test_mixed_naive_and_aware_timestamps(self, products):
        """Test naive timestamps sort as UTC alongside aware ones."""
        products[0].created_at = datetime(2024, 1, 10, 12)
        ordering = compose_ordering(Product, SortDescriptor(field="created_at"))

        ordered = [p.id for p in ordering.sort(products)]

        assert ordered[:10] == [2, 3, 4, 5, 6, 7, 8, 9, 10, 1]


class TestOrderingClause:
    """Tests for SQL rendering of orderings."""

    def test_ascending_clause(self):
        ordering = compose_ordering(Product, SortDescriptor(field="price"))
        assert str(ordering.to_clause()) == "products.price ASC NULLS FIRST"

    def test_descending_clause(self):
        ordering = compose_ordering(
            Product, SortDescriptor(field="price", direction="desc")
        )
        assert str(ordering.to_clause()) == "products.price DESC NULLS LAST"
