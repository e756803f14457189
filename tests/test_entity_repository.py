"""
Tests for EntityRepository.

Read and write operations run against the seeded SQLite database through
the awaitable session facade; failure handling is verified with a mocked
AsyncSession.
"""

import logging
from decimal import Decimal

import pytest
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, OperationalError

from entity_repository.exceptions import EntityNotFoundError, UnknownFieldError
from entity_repository.protocols import Repository
from entity_repository.repositories.base import EntityRepository
from entity_repository.schemas.pagination import PaginationQuery
from tests.mocks.products import PRODUCTS_UNDER_100, Product, ProductDto


class PriceChange(BaseModel):
    """Partial update DTO."""

    price: Decimal | None = None
    description: str | None = None


class ProductRepository(EntityRepository[Product]):
    def __init__(self, session):
        super().__init__(session, Product)


@pytest.fixture
def repo(db_session):
    """
    Provides a product repository over the seeded database.

    Returns:
        ProductRepository: Repository bound to the SQLite-backed session
    """
    return ProductRepository(db_session)


class TestEntityRepositoryRead:
    """Tests for repository read operations."""

    def test_satisfies_protocol(self, repo):
        assert isinstance(repo, Repository)

    @pytest.mark.asyncio
    async def test_get_projected(self, repo):
        dto = await repo.get(8, ProductDto)

        assert dto == ProductDto(
            name="Antivirus License",
            description="Security Software subscription",
            price=Decimal("95.00"),
        )

    @pytest.mark.asyncio
    async def test_get_without_shape_returns_entity(self, repo):
        product = await repo.get(1)

        assert isinstance(product, Product)
        assert product.name == "Wireless Mouse"

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, repo):
        assert await repo.get(999, ProductDto) is None

    @pytest.mark.asyncio
    async def test_get_or_raise_missing(self, repo):
        with pytest.raises(EntityNotFoundError) as exc_info:
            await repo.get_or_raise(999)

        assert exc_info.value.key == 999
        assert "Product" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_get_all(self, repo):
        items = await repo.get_all(ProductDto)

        assert len(items) == 20
        assert all(isinstance(item, ProductDto) for item in items)

    @pytest.mark.asyncio
    async def test_get_paginated(self, repo):
        query = PaginationQuery(
            page_size=3,
            sort_field="price",
            filters={"price": {"operator": "less-than", "value": 100}},
        )

        page = await repo.get_paginated(query, ProductDto)

        assert page.total_count == PRODUCTS_UNDER_100
        assert [dto.price for dto in page.items] == [
            Decimal("25.00"),
            Decimal("30.00"),
            Decimal("35.00"),
        ]

    @pytest.mark.asyncio
    async def test_get_paginated_unknown_field(self, repo, db_session):
        query = PaginationQuery(
            filters={"colour": {"operator": "equals", "value": "red"}}
        )

        with pytest.raises(UnknownFieldError):
            await repo.get_paginated(query)

        assert db_session.executed == []


class TestEntityRepositoryWrite:
    """Tests for repository create, update and delete operations."""

    @pytest.mark.asyncio
    async def test_create(self, repo):
        created = await repo.create(
            Product(name="Stylus", description="Active pen", price=Decimal("60"))
        )

        assert created.id == 21
        assert created.created_at is not None
        assert (await repo.get(21)).name == "Stylus"

    @pytest.mark.asyncio
    async def test_create_range(self, repo):
        created = await repo.create_range(
            [
                Product(name="Hub", description="USB hub", price=Decimal("40")),
                Product(name="Dock", description="Mini dock", price=Decimal("90")),
            ],
            ProductDto,
        )

        assert [dto.name for dto in created] == ["Hub", "Dock"]
        assert len(await repo.get_all()) == 22

    @pytest.mark.asyncio
    async def test_update_applies_set_fields(self, repo):
        updated = await repo.update(1, PriceChange(price=Decimal("19.99")))

        assert updated.price == Decimal("19.99")
        assert updated.description == "Ergonomic wireless mouse"
        assert updated.updated_at is not None

    @pytest.mark.asyncio
    async def test_update_from_mapping(self, repo):
        dto = await repo.update(2, {"name": "USB-C Cable 2m"}, ProductDto)

        assert dto.name == "USB-C Cable 2m"

    @pytest.mark.asyncio
    async def test_update_unknown_field(self, repo):
        with pytest.raises(UnknownFieldError):
            await repo.update(1, {"colour": "red"})

    @pytest.mark.asyncio
    async def test_update_missing_entity(self, repo):
        with pytest.raises(EntityNotFoundError):
            await repo.update(999, PriceChange(price=Decimal("1")))

    @pytest.mark.asyncio
    async def test_delete(self, repo):
        await repo.delete(3)

        assert await repo.get(3) is None
        assert len(await repo.get_all()) == 19

    @pytest.mark.asyncio
    async def test_delete_missing_entity(self, repo):
        with pytest.raises(EntityNotFoundError):
            await repo.delete(999)

    @pytest.mark.asyncio
    async def test_delete_range(self, repo):
        await repo.delete_range([4, 5, 6])

        assert len(await repo.get_all()) == 17

    @pytest.mark.asyncio
    async def test_delete_range_with_missing_id_deletes_nothing(self, repo):
        with pytest.raises(EntityNotFoundError) as exc_info:
            await repo.delete_range([4, 999, 5])

        assert exc_info.value.key == 999
        assert len(await repo.get_all()) == 20


class TestEntityRepositoryErrors:
    """Tests for database failure handling with a mocked session."""

    @pytest.mark.asyncio
    async def test_create_rolls_back_on_error(self, mock_session):
        mock_session.flush.side_effect = IntegrityError(
            "INSERT", {}, Exception("UNIQUE constraint failed")
        )
        repo = ProductRepository(mock_session)

        with pytest.raises(IntegrityError):
            await repo.create(Product(name="Dup", description="", price=1))

        mock_session.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_delete_looks_up_by_primary_key(self, mock_session):
        product = Product(id=5, name="HDMI Adapter", description="", price=49)
        mock_session.get.return_value = product
        repo = ProductRepository(mock_session)

        await repo.delete(5)

        mock_session.get.assert_called_once_with(Product, 5)
        mock_session.delete.assert_called_once_with(product)
        mock_session.flush.assert_called_once()

    @pytest.mark.asyncio
    async def test_lookup_error_logged_and_raised(self, mock_session, caplog):
        mock_session.get.side_effect = OperationalError(
            "SELECT", {}, Exception("database is locked")
        )
        repo = ProductRepository(mock_session)

        with caplog.at_level(logging.ERROR, logger="entity_repository"):
            with pytest.raises(OperationalError):
                await repo.delete(5)

        assert "Error loading Product 5" in caplog.text
        mock_session.delete.assert_not_called()
