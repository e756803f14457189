"""
Predicate composition.

A filter descriptor is turned into one conjunctive Predicate: every
per-field condition must hold. There is no OR combination. Composition is
all-or-nothing; the first malformed filter aborts the whole call.
"""

from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import and_, true
from sqlalchemy.sql.elements import ColumnElement

from entity_repository.query.fields import resolve_field
from entity_repository.query.operators import FieldCondition, build_condition
from entity_repository.schemas.pagination import FieldFilter


@dataclass(frozen=True)
class Predicate:
    """
    Logical AND of zero or more field conditions.

    An empty predicate is the universal predicate: every record passes.
    Instances are callable for in-process evaluation and render to a SQL
    clause via `to_clause()`.
    """

    conditions: tuple[FieldCondition, ...] = ()

    @property
    def is_universal(self) -> bool:
        return not self.conditions

    def __call__(self, record: Any) -> bool:
        return all(condition.matches(record) for condition in self.conditions)

    def to_clause(self) -> ColumnElement:
        if self.is_universal:
            return true()
        return and_(*(condition.to_clause() for condition in self.conditions))


def compose_predicate(
    model: type,
    filters: Mapping[str, FieldFilter | Mapping[str, Any]] | None,
) -> Predicate:
    """
    Compose a conjunctive predicate from a filter descriptor.

    Args:
        model: Entity type the filters refer to.
        filters: Field name -> FieldFilter (or a mapping with `operator`
            and `value` keys). None or empty yields the universal predicate.

    Returns:
        Predicate combining every field condition with logical AND.

    Raises:
        UnknownFieldError: A filter names a field the entity does not have.
        UnsupportedOperatorError: A filter uses an operator outside the catalog.
        FilterValueTypeMismatchError: A literal cannot be coerced.
    """
    if not filters:
        return Predicate()

    conditions = []
    for field_name, field_filter in filters.items():
        if not isinstance(field_filter, FieldFilter):
            field_filter = FieldFilter.model_validate(field_filter)
        field = resolve_field(model, field_name)
        conditions.append(
            build_condition(field, field_filter.operator, field_filter.value)
        )
    return Predicate(tuple(conditions))
