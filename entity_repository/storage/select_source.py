"""
SQL push-down queryable source.

Translates composed predicates and orderings into a SQLAlchemy Select and
executes it through a sqlmodel AsyncSession. Two round trips are made per
page: COUNT over the filtered statement, then the OFFSET/LIMIT fetch. Run
them in the same transaction (the default for one session) to keep count
and page consistent.

Example:
    ```python
    from sqlmodel import select
    from entity_repository.storage.select_source import SelectSource

    async with async_session() as session:
        source = SelectSource(session, Product)
        page = await run_query(source, Product, query)

        # Start from a pre-restricted statement instead of the whole table
        active = SelectSource(session, select(Product).where(Product.active))
    ```
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from entity_repository.logging import logger
from entity_repository.query.ordering import Ordering
from entity_repository.query.predicates import Predicate

T = TypeVar("T")


class SelectSource(Generic[T]):
    """
    Queryable view backed by a SQLAlchemy Select statement.

    Attributes:
        session: Async session the statement is executed with.
        statement: Current Select with filters, ordering and slicing applied.
    """

    def __init__(self, session: AsyncSession, target: type[T] | Select[Any]):
        """
        Initialize the source.

        Args:
            session: sqlmodel AsyncSession used for count and fetch.
            target: Table model to select from, or a prepared Select.
        """
        self.session = session
        self.statement: Select[Any] = (
            target if isinstance(target, Select) else select(target)
        )

    def _derive(self, statement: Select[Any]) -> "SelectSource[T]":
        return SelectSource(self.session, statement)

    def where(self, predicate: Predicate) -> "SelectSource[T]":
        if predicate.is_universal:
            return self
        return self._derive(self.statement.where(predicate.to_clause()))

    def order_by(self, ordering: Ordering) -> "SelectSource[T]":
        return self._derive(self.statement.order_by(ordering.to_clause()))

    def slice(self, skip: int, take: int) -> "SelectSource[T]":
        return self._derive(self.statement.offset(skip).limit(take))

    def count_statement(self) -> Select[Any]:
        """COUNT(*) over the current statement with ordering stripped."""
        filtered = self.statement.order_by(None).subquery()
        return select(func.count()).select_from(filtered)

    async def count(self) -> int:
        try:
            result = await self.session.exec(self.count_statement())
            return result.one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting rows: {e}")
            raise

    async def fetch(self) -> list[T]:
        try:
            result = await self.session.exec(self.statement)
            return list(result.all())
        except SQLAlchemyError as e:
            logger.error(f"Error fetching rows: {e}")
            raise
