"""
Base model for all entity tables with async relationship support.

Entities are identifiable records carrying creation and update timestamps.
Concrete entities inherit from Entity and declare their own columns:

    class Product(Entity, table=True):
        name: str
        price: Decimal

Entities keyed by something other than an integer override `id`:

    class Tenant(Entity, table=True):
        id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
"""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Entity(SQLModel, AsyncAttrs):  # type: ignore[misc]
    """
    Base class for persisted, identifiable records.

    Combines SQLModel with SQLAlchemy's AsyncAttrs mixin so lazy-loaded
    relationships can be awaited via `awaitable_attrs` in async sessions.

    Attributes:
        id: Primary key identifier.
        created_at: Creation timestamp (UTC), set on construction.
        updated_at: Timestamp of the last update through a repository.
    """

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = Field(default=None)
