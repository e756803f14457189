"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for product data, in-memory and SQLite
backed sources, and sessions.
"""

import os

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Keep test output quiet and deterministic before importing library modules
os.environ.setdefault("ENTITY_REPO_LOG_LEVEL", "WARNING")
os.environ.setdefault("ENTITY_REPO_DEFAULT_PAGE_SIZE", "10")

from entity_repository.storage import MemorySource  # noqa: E402
from tests.mocks.products import make_products  # noqa: E402
from tests.mocks.sessions import (  # noqa: E402
    SyncBackedAsyncSession,
    create_mock_session,
)


@pytest.fixture
def products():
    """
    Provides the twenty seed products, detached from any session.

    Returns:
        list[Product]: Products with ids 1..20 in ascending price order
    """
    return make_products()


@pytest.fixture
def shuffled_products(products):
    """
    Provides the seed products in an order unrelated to price.

    Returns:
        list[Product]: Products with odd ids first, then even ids reversed
    """
    odd = [product for product in products if product.id % 2]
    even = [product for product in products if not product.id % 2]
    return odd + even[::-1]


@pytest.fixture
def memory_source(shuffled_products):
    """
    Provides an in-process source over the shuffled seed products.

    Returns:
        MemorySource: Snapshot of twenty products
    """
    return MemorySource(shuffled_products)


@pytest.fixture
def engine():
    """
    Provides an in-memory SQLite engine with all tables created.

    A StaticPool keeps the single connection (and therefore the database)
    alive for the duration of the test.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sync_session(engine):
    """
    Provides a synchronous session over the seeded database.

    Returns:
        Session: Session with the twenty products committed
    """
    with Session(engine) as session:
        session.add_all(make_products())
        session.commit()
        yield session


@pytest.fixture
def db_session(sync_session):
    """
    Provides an awaitable session facade over the seeded database.

    Returns:
        SyncBackedAsyncSession: Session accepted wherever AsyncSession is
    """
    return SyncBackedAsyncSession(sync_session)


@pytest.fixture
def mock_session():
    """
    Provides a mock AsyncSession for testing.

    Returns:
        AsyncMock: Mocked database session
    """
    return create_mock_session()
