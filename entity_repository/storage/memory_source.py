"""
In-process queryable source.

Snapshots an iterable of records into an immutable tuple at construction,
so counting and fetching always observe the same data. Useful for records
that are already materialized (caches, fixtures, API payloads) and for
exercising the pipeline without a database.

Example:
    ```python
    from entity_repository.storage.memory_source import MemorySource

    source = MemorySource(products)
    page = await run_query(source, Product, query)
    ```
"""

from typing import Generic, Iterable, TypeVar

from entity_repository.query.ordering import Ordering
from entity_repository.query.predicates import Predicate

T = TypeVar("T")


class MemorySource(Generic[T]):
    """Queryable view over an immutable snapshot of records."""

    def __init__(self, records: Iterable[T]):
        self._records: tuple[T, ...] = tuple(records)

    def __len__(self) -> int:
        return len(self._records)

    def where(self, predicate: Predicate) -> "MemorySource[T]":
        if predicate.is_universal:
            return self
        return MemorySource(record for record in self._records if predicate(record))

    def order_by(self, ordering: Ordering) -> "MemorySource[T]":
        return MemorySource(ordering.sort(self._records))

    def slice(self, skip: int, take: int) -> "MemorySource[T]":
        return MemorySource(self._records[skip : skip + take])

    async def count(self) -> int:
        return len(self._records)

    async def fetch(self) -> list[T]:
        return list(self._records)
