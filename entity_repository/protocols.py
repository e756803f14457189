"""
Protocol classes for structural subtyping (duck typing with type safety).

Protocols define the collaborator interfaces of the query pipeline without
requiring explicit inheritance. Any class that implements the required
methods is considered compatible:

- QueryableSource: a composable, lazily-executed view over stored records
- Projector: maps stored records to caller-facing shapes
- Repository: the operations exposed to callers for one entity type
"""

from typing import Any, Iterable, Protocol, Self, Sequence, TypeVar, runtime_checkable

from entity_repository.query.ordering import Ordering
from entity_repository.query.predicates import Predicate
from entity_repository.schemas.pagination import PaginationQuery, PaginationResult

T = TypeVar("T")
S = TypeVar("S")


@runtime_checkable
class QueryableSource(Protocol[T]):
    """
    Protocol for queryable data sources.

    Composition methods (`where`, `order_by`, `slice`) are pure and return a
    new source; only `count` and `fetch` touch storage. Implementations must
    let cancellation and storage errors propagate unchanged.

    Type Parameters:
        T: The record type the source yields.
    """

    def where(self, predicate: Predicate) -> Self:
        """Restrict the view to records satisfying the predicate."""
        ...

    def order_by(self, ordering: Ordering) -> Self:
        """Order the view by the given ordering."""
        ...

    def slice(self, skip: int, take: int) -> Self:
        """Skip `skip` records, then keep at most `take`."""
        ...

    async def count(self) -> int:
        """Count records in the current view (ignores any ordering)."""
        ...

    async def fetch(self) -> list[T]:
        """Materialize the current view into records."""
        ...


@runtime_checkable
class Projector(Protocol[T, S]):
    """
    Protocol for record-to-shape projection.

    Projection is a pure mapping; the pipeline assumes no side effects.
    """

    def project(self, record: T) -> S:
        """Project a single record."""
        ...

    def project_many(self, records: Iterable[T]) -> list[S]:
        """Project records preserving their order."""
        ...


@runtime_checkable
class Repository(Protocol[T]):
    """
    Protocol for entity repositories.

    Type Parameters:
        T: The entity type this repository manages.
    """

    async def get(self, id: Any, shape: type | None = None) -> Any | None:
        """Get one projected entity by identifier, or None."""
        ...

    async def get_all(self, shape: type | None = None) -> Sequence[Any]:
        """Get every entity, projected."""
        ...

    async def get_paginated(
        self, query: PaginationQuery, shape: type | None = None
    ) -> PaginationResult[Any]:
        """Get one filtered, ordered page of projected entities."""
        ...
