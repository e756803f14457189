"""
Generic entity repository.

The Repository pattern separates data access logic from business logic.
EntityRepository binds an async session to one entity type and exposes
point lookups, full listing, paginated queries and basic persistence, each
result projected onto an optional caller-facing shape.

Example:
    ```python
    from entity_repository import EntityRepository, PaginationQuery


    class ProductRepository(EntityRepository[Product]):
        def __init__(self, session: AsyncSession):
            super().__init__(session, Product)


    async with async_session() as session:
        repo = ProductRepository(session)
        dto = await repo.get(1, ProductDto)
        page = await repo.get_paginated(
            PaginationQuery(page_size=3, sort_field="price"), ProductDto
        )
        await session.commit()
    ```

Transactions belong to the caller: the repository flushes so generated
values are populated, but never commits.
"""

from typing import Any, Generic, Iterable, Mapping, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from entity_repository.exceptions import EntityNotFoundError
from entity_repository.logging import logger
from entity_repository.models.base import utc_now
from entity_repository.projection import projector_for
from entity_repository.query.fields import describe_fields, resolve_field
from entity_repository.query.pipeline import QueryPipeline
from entity_repository.schemas.pagination import PaginationQuery, PaginationResult
from entity_repository.storage.select_source import SelectSource

T = TypeVar("T")


class EntityRepository(Generic[T]):
    """
    Repository providing query and persistence operations for one entity.

    Type Parameters:
        T: The SQLModel table type this repository manages.

    Attributes:
        session: The database session for executing queries.
        model: The SQLModel class this repository manages.
        pipeline: Query pipeline used by get_paginated.
    """

    def __init__(
        self,
        session: AsyncSession,
        model: type[T],
        pipeline: QueryPipeline[T] | None = None,
    ):
        """
        Initialize repository with session and model.

        Args:
            session: Database session for executing queries.
            model: The SQLModel class to manage.
            pipeline: Optional pre-configured pipeline for this model.
        """
        self.session = session
        self.model = model
        self.pipeline = pipeline or QueryPipeline(model)

    @property
    def _id_column(self) -> Any:
        return resolve_field(self.model, "id").require_column()

    async def _find(self, id: Any) -> T | None:
        try:
            return await self.session.get(self.model, id)
        except SQLAlchemyError as e:
            logger.error(f"Error loading {self.model.__name__} {id}: {e}")
            raise

    async def get(self, id: Any, shape: type[BaseModel] | None = None) -> Any | None:
        """
        Get entity by identifier.

        Args:
            id: Primary key value.
            shape: Optional pydantic model to project onto.

        Returns:
            The projected entity, or None when no record has this id.

        Raises:
            SQLAlchemyError: If database query fails.
        """
        try:
            stmt = select(self.model).where(self._id_column == id)
            result = await self.session.exec(stmt)
            entity = result.first()
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {self.model.__name__} {id}: {e}")
            raise
        if entity is None:
            return None
        return projector_for(shape).project(entity)

    async def get_or_raise(
        self, id: Any, shape: type[BaseModel] | None = None
    ) -> Any:
        """
        Get entity by identifier or fail.

        Raises:
            EntityNotFoundError: If no record has this id.
        """
        found = await self.get(id, shape)
        if found is None:
            raise EntityNotFoundError(self.model, id)
        return found

    async def get_all(self, shape: type[BaseModel] | None = None) -> list[Any]:
        """
        Get all entities.

        Args:
            shape: Optional pydantic model to project onto.

        Returns:
            Every entity of this type, projected, in storage order.

        Raises:
            SQLAlchemyError: If database query fails.
        """
        records = await SelectSource(self.session, self.model).fetch()
        return projector_for(shape).project_many(records)

    async def get_paginated(
        self, query: PaginationQuery, shape: type[BaseModel] | None = None
    ) -> PaginationResult[Any]:
        """
        Get one page of filtered, ordered entities.

        Args:
            query: Page, sort and filter options.
            shape: Optional pydantic model to project onto.

        Returns:
            PaginationResult with the page and the filtered total count.

        Raises:
            QueryValidationError: If filters or sort field are invalid.
            SQLAlchemyError: If database query fails.
        """
        return await self.pipeline.run_query(
            SelectSource(self.session, self.model),
            query,
            projector_for(shape),
        )

    async def create(self, entity: T, shape: type[BaseModel] | None = None) -> Any:
        """
        Create new entity in database.

        Args:
            entity: The entity instance to create.
            shape: Optional pydantic model to project onto.

        Returns:
            The created entity with generated fields populated, projected.

        Raises:
            SQLAlchemyError: If database operation fails.
        """
        try:
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating {self.model.__name__}: {e}")
            raise
        return projector_for(shape).project(entity)

    async def create_range(
        self, entities: Iterable[T], shape: type[BaseModel] | None = None
    ) -> list[Any]:
        """
        Create several entities in one flush.

        Returns:
            The created entities, projected, in input order.

        Raises:
            SQLAlchemyError: If database operation fails.
        """
        entities = list(entities)
        try:
            self.session.add_all(entities)
            await self.session.flush()
            for entity in entities:
                await self.session.refresh(entity)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating {self.model.__name__} range: {e}")
            raise
        return projector_for(shape).project_many(entities)

    async def update(
        self,
        id: Any,
        changes: BaseModel | Mapping[str, Any],
        shape: type[BaseModel] | None = None,
    ) -> Any:
        """
        Update an existing entity from a DTO or mapping.

        Only fields explicitly set on a pydantic DTO are applied; `updated_at`
        is stamped automatically.

        Args:
            id: Primary key of the entity to update.
            changes: Pydantic model or mapping of field -> new value.
            shape: Optional pydantic model to project onto.

        Returns:
            The updated entity, projected.

        Raises:
            EntityNotFoundError: If no record has this id.
            UnknownFieldError: If a change names a field the entity lacks.
            SQLAlchemyError: If database operation fails.
        """
        values = (
            changes.model_dump(exclude_unset=True)
            if isinstance(changes, BaseModel)
            else dict(changes)
        )
        for name in values:
            resolve_field(self.model, name)

        entity = await self._find(id)
        if entity is None:
            raise EntityNotFoundError(self.model, id)

        for name, value in values.items():
            setattr(entity, name, value)
        if "updated_at" in describe_fields(self.model):
            entity.updated_at = utc_now()

        try:
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error updating {self.model.__name__} {id}: {e}")
            raise
        return projector_for(shape).project(entity)

    async def delete(self, id: Any) -> None:
        """
        Delete entity by identifier.

        Raises:
            EntityNotFoundError: If no record has this id.
            SQLAlchemyError: If database operation fails.
        """
        entity = await self._find(id)
        if entity is None:
            raise EntityNotFoundError(self.model, id)
        try:
            await self.session.delete(entity)
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error deleting {self.model.__name__} {id}: {e}")
            raise

    async def delete_range(self, ids: Iterable[Any]) -> None:
        """
        Delete several entities by identifier.

        Every id is checked first; nothing is deleted if any is missing.

        Raises:
            EntityNotFoundError: For the first id with no record.
            SQLAlchemyError: If database operation fails.
        """
        ids = list(ids)
        try:
            stmt = select(self.model).where(self._id_column.in_(ids))
            result = await self.session.exec(stmt)
            entities = list(result.all())
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {self.model.__name__} range: {e}")
            raise

        found = {entity.id for entity in entities}
        for id in ids:
            if id not in found:
                raise EntityNotFoundError(self.model, id)

        try:
            for entity in entities:
                await self.session.delete(entity)
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error deleting {self.model.__name__} range: {e}")
            raise
