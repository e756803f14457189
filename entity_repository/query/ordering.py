"""
Order composition.

Builds an Ordering from a sort descriptor, or None when no sort field was
requested. Without an explicit ordering the source's natural iteration
order applies, and page boundaries may shift between calls.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from sqlalchemy import asc, desc
from sqlalchemy.sql.elements import ColumnElement

from entity_repository.constants import SortDirection
from entity_repository.query.coercion import to_utc
from entity_repository.query.fields import ResolvedField, resolve_field
from entity_repository.schemas.pagination import SortDescriptor


@dataclass(frozen=True)
class Ordering:
    """
    Key-extraction ordering over one field.

    Nulls sort first when ascending and last when descending, for both
    in-process sorting and SQL.
    """

    field: ResolvedField
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC

    def _key(self, record: Any) -> tuple[bool, Any]:
        value = self.field.get(record)
        if isinstance(value, datetime):
            value = to_utc(value)
        return (value is not None, value)

    def sort(self, records: Iterable[Any]) -> list[Any]:
        """Return records sorted by the field (stable)."""
        return sorted(records, key=self._key, reverse=self.descending)

    def to_clause(self) -> ColumnElement:
        column = self.field.require_column()
        if self.descending:
            return desc(column).nulls_last()
        return asc(column).nulls_first()


def compose_ordering(
    model: type, sort: SortDescriptor | None
) -> Ordering | None:
    """
    Compose an ordering from a sort descriptor.

    Args:
        model: Entity type to sort.
        sort: Sort descriptor; None or one without a field means no
            explicit ordering.

    Returns:
        Ordering, or None for "no explicit order".

    Raises:
        UnknownFieldError: If the sort field does not exist on the entity.
    """
    if sort is None or sort.field is None:
        return None
    return Ordering(resolve_field(model, sort.field), sort.direction)
