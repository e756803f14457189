"""
Field resolution by name.

Entity types are described once (the description is cached per type) and
every lookup afterwards is a case-sensitive dictionary hit. Pydantic models,
SQLModel tables and dataclasses can be described; for mapped tables the
resolved field also carries the SQLAlchemy column attribute so predicates
and orderings can be pushed down to SQL.
"""

import types
from dataclasses import dataclass, fields as dataclass_fields, is_dataclass
from functools import lru_cache
from typing import Any, Mapping, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect

from entity_repository.exceptions import UnknownFieldError


@dataclass(frozen=True)
class ResolvedField:
    """
    Typed accessor for one field of an entity type.

    Attributes:
        entity: Name of the entity type the field belongs to.
        name: Field name, exactly as declared.
        python_type: Native type values are coerced to, or None when the
            declaration does not name a single concrete type.
        column: SQLAlchemy instrumented attribute for mapped tables.
    """

    entity: str
    name: str
    python_type: type | None
    column: Any = None

    def get(self, record: Any) -> Any:
        """Read the field's current value from a record."""
        return getattr(record, self.name)

    @property
    def is_mapped(self) -> bool:
        return self.column is not None

    def require_column(self) -> Any:
        """
        Return the column attribute for SQL push-down.

        Raises:
            TypeError: If the entity type is not a mapped table.
        """
        if self.column is None:
            raise TypeError(
                f"{self.entity}.{self.name} is not mapped to a table column"
            )
        return self.column


def _unwrap_annotation(annotation: Any) -> type | None:
    """Reduce `X | None` / `Optional[X]` to X; anything else not a class is None."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) != 1:
            return None
        return _unwrap_annotation(args[0])
    if isinstance(annotation, type):
        return annotation
    return None


def _column_python_type(column: Any) -> type | None:
    try:
        python_type = column.property.columns[0].type.python_type
    except (AttributeError, IndexError, NotImplementedError):
        return None
    # Generic decorators (AutoString, UTCDateTime) report `object`
    if python_type is object or not isinstance(python_type, type):
        return None
    return python_type


def _declared_annotations(model: type) -> dict[str, Any]:
    if issubclass(model, BaseModel):
        return {
            name: info.annotation for name, info in model.model_fields.items()
        }
    if is_dataclass(model):
        hints = get_type_hints(model)
        return {f.name: hints.get(f.name) for f in dataclass_fields(model)}
    raise TypeError(
        f"Cannot describe fields of {model!r}: expected a pydantic model, "
        "SQLModel table or dataclass"
    )


@lru_cache(maxsize=None)
def describe_fields(model: type) -> Mapping[str, ResolvedField]:
    """
    Describe every declared field of an entity type.

    Args:
        model: Pydantic model, SQLModel table or dataclass type.

    Returns:
        Read-only mapping of field name to ResolvedField.

    Raises:
        TypeError: If the type cannot be described.
    """
    mapper = sa_inspect(model, raiseerr=False)
    mapped_columns = set(mapper.columns.keys()) if mapper is not None else set()

    described = {}
    for name, annotation in _declared_annotations(model).items():
        column = getattr(model, name) if name in mapped_columns else None
        python_type = _unwrap_annotation(annotation)
        if python_type is None and column is not None:
            python_type = _column_python_type(column)
        described[name] = ResolvedField(
            entity=model.__name__,
            name=name,
            python_type=python_type,
            column=column,
        )
    return types.MappingProxyType(described)


def resolve_field(model: type, name: str) -> ResolvedField:
    """
    Resolve a field by exact, case-sensitive name.

    Args:
        model: Entity type to look the field up on.
        name: Field name (no dotted paths).

    Returns:
        ResolvedField with accessor and declared type.

    Raises:
        UnknownFieldError: If the type declares no such field.
    """
    field = describe_fields(model).get(name) if isinstance(name, str) else None
    if field is None:
        raise UnknownFieldError(model.__name__, str(name))
    return field
