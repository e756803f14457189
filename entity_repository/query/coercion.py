"""
Literal coercion.

Filter values arrive as JSON scalars or query-string text. Before a
condition is built the literal is converted into the native type of the
field it targets, so a malformed value is rejected before any source is
queried.

Date-only literals on datetime fields mean the start of that day. Naive
datetimes are read as UTC whenever they meet an aware one, see `to_utc`.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from entity_repository.constants import FALSE_LITERALS, TRUE_LITERALS
from entity_repository.exceptions import FilterValueTypeMismatchError
from entity_repository.query.fields import ResolvedField


def _coerce_bool(field: ResolvedField, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    text = str(value).strip().lower()
    if text in TRUE_LITERALS:
        return True
    if text in FALSE_LITERALS:
        return False
    raise FilterValueTypeMismatchError(field.name, "boolean", value)


def _coerce_number(field: ResolvedField, value: Any, python_type: type) -> Any:
    if isinstance(value, bool):
        raise FilterValueTypeMismatchError(field.name, "number", value)
    if isinstance(value, (int, float, Decimal)):
        if python_type is int:
            if isinstance(value, int):
                return value
            if value != value or value in (float("inf"), float("-inf")):
                raise FilterValueTypeMismatchError(field.name, "integer", value)
            if int(value) != value:
                raise FilterValueTypeMismatchError(field.name, "integer", value)
            return int(value)
        if python_type is Decimal:
            return value if isinstance(value, Decimal) else Decimal(str(value))
        return python_type(value)
    text = str(value).strip()
    if not text:
        raise FilterValueTypeMismatchError(field.name, "number", value)
    normalized = text.replace(",", ".")
    try:
        if python_type is int:
            return int(normalized)
        if python_type is Decimal:
            return Decimal(normalized)
        return python_type(normalized)
    except (ValueError, TypeError, InvalidOperation):
        raise FilterValueTypeMismatchError(field.name, "number", value)


def _coerce_date(field: ResolvedField, value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        # Accept either YYYY-MM-DD or full ISO datetime and take its date part.
        if "T" in text or " " in text:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError:
        raise FilterValueTypeMismatchError(field.name, "date", value)


def _coerce_datetime(field: ResolvedField, value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    text = str(value).strip()
    try:
        if "T" not in text and " " not in text and len(text) == 10:
            # Date-only literal -> start of the day.
            return datetime.combine(
                date.fromisoformat(text), datetime.min.time()
            )
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise FilterValueTypeMismatchError(field.name, "datetime", value)


def _coerce_uuid(field: ResolvedField, value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        raise FilterValueTypeMismatchError(field.name, "uuid", value)


def _coerce_enum(field: ResolvedField, value: Any, enum_type: type[Enum]) -> Enum:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        pass
    if isinstance(value, str) and value in enum_type.__members__:
        return enum_type.__members__[value]
    raise FilterValueTypeMismatchError(field.name, enum_type.__name__, value)


def _coerce_str(field: ResolvedField, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal, bool, date, uuid.UUID)):
        return str(value)
    raise FilterValueTypeMismatchError(field.name, "text", value)


def coerce_value(field: ResolvedField, value: Any) -> Any:
    """
    Convert a loosely-typed filter literal into the field's native type.

    Args:
        field: Resolved target field.
        value: Literal supplied by the caller. None passes through; callers
            decide whether a null literal is legal for the operator.

    Returns:
        The literal converted to `field.python_type`.

    Raises:
        FilterValueTypeMismatchError: If the literal cannot be converted.
    """
    if value is None:
        return None
    python_type = field.python_type
    # Enum before str/int: str-valued enums subclass str.
    if python_type is not None and issubclass(python_type, Enum):
        return _coerce_enum(field, value, python_type)
    if python_type is bool:
        return _coerce_bool(field, value)
    if python_type in {int, float, Decimal}:
        return _coerce_number(field, value, python_type)
    if python_type is datetime:
        return _coerce_datetime(field, value)
    if python_type is date:
        return _coerce_date(field, value)
    if python_type is uuid.UUID:
        return _coerce_uuid(field, value)
    if python_type is str:
        return _coerce_str(field, value)
    if python_type is None or isinstance(value, python_type):
        return value
    raise FilterValueTypeMismatchError(field.name, python_type.__name__, value)


def coerce_text(field: ResolvedField, value: Any) -> str:
    """
    Convert a filter literal to text for contains/starts-with/ends-with.

    The field side of these operators is stringified at evaluation time, so
    only the literal is converted here.

    Raises:
        FilterValueTypeMismatchError: If the literal is null or not scalar.
    """
    if value is None:
        raise FilterValueTypeMismatchError(field.name, "text", value)
    return _coerce_str(field, value)


def to_text(value: Any) -> str:
    """Textual form of a field value used by the text operators in-process."""
    if isinstance(value, Enum):
        return value.name
    return str(value)


def to_utc(value: datetime) -> datetime:
    """Read a naive datetime as UTC; convert an aware one to UTC."""
    if value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def comparable(current: Any, literal: Any) -> tuple[Any, Any]:
    """
    Align a field value and a literal before an in-process comparison.

    Two datetimes are both moved to UTC so naive and aware values compare
    instead of raising TypeError. Anything else is returned unchanged.
    """
    if isinstance(current, datetime) and isinstance(literal, datetime):
        return to_utc(current), to_utc(literal)
    return current, literal


def bind_datetime(value: datetime, aware: bool) -> datetime:
    """
    Prepare a datetime literal for a column with or without timezone support.

    Columns storing naive values are assumed to hold UTC wall time.
    """
    value = to_utc(value)
    return value if aware else value.replace(tzinfo=None)
