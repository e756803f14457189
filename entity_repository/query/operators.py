"""
Operator catalog.

Maps every MatchMode to a rule that builds a per-field condition from a
resolved field and a coerced literal. Each rule knows how to evaluate itself
in-process against a record and how to render itself as a SQLAlchemy clause,
so the same composed predicate can run against either kind of source.

Null semantics are shared by both renderings:
- relational and text operators never match a null field
- equals/not-equals with a null literal test IS NULL / IS NOT NULL
- not-equals with a non-null literal also matches null fields

Text operators compare against the field's textual form. Booleans render as
"True"/"False" in both places. Other non-text columns are CAST to VARCHAR,
so numeric formatting follows the database (SQLite renders 25.00 as "25.0").
"""

import operator
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from sqlalchemy import String, case, cast, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from entity_repository.constants import (
    MATCH_MODE_SYMBOLS,
    NULLABLE_MATCH_MODES,
    TEXT_MATCH_MODES,
    MatchMode,
)
from entity_repository.exceptions import (
    FilterValueTypeMismatchError,
    UnsupportedOperatorError,
)
from entity_repository.query.coercion import (
    bind_datetime,
    coerce_text,
    coerce_value,
    comparable,
    to_text,
)
from entity_repository.query.fields import ResolvedField


@dataclass(frozen=True)
class OperatorRule:
    """
    Predicate-construction rule for one operator.

    Attributes:
        mode: Operator tag this rule implements.
        evaluate: In-process check `(field_value, literal) -> bool`, only
            called with a non-null field value.
        render: SQL rendering `(column, literal) -> clause`.
    """

    mode: MatchMode
    evaluate: Callable[[Any, Any], bool]
    render: Callable[[Any, Any], ColumnElement]

    @property
    def textual(self) -> bool:
        """Whether the field is compared through its textual form."""
        return self.mode in TEXT_MATCH_MODES


def _text_form(column: Any, python_type: type | None) -> ColumnElement:
    """Textual form of a column, matching `to_text` for str and bool fields."""
    if python_type is str:
        return column
    if python_type is bool:
        return case((column == true(), "True"), (column == false(), "False"))
    return cast(column, String)


def _render_not_equals(column: Any, value: Any) -> ColumnElement:
    return or_(column != value, column.is_(None))


OPERATOR_CATALOG: dict[MatchMode, OperatorRule] = {
    MatchMode.EQUALS: OperatorRule(
        MatchMode.EQUALS, operator.eq, operator.eq
    ),
    MatchMode.NOT_EQUALS: OperatorRule(
        MatchMode.NOT_EQUALS, operator.ne, _render_not_equals
    ),
    MatchMode.GREATER_THAN: OperatorRule(
        MatchMode.GREATER_THAN, operator.gt, operator.gt
    ),
    MatchMode.GREATER_THAN_OR_EQUAL: OperatorRule(
        MatchMode.GREATER_THAN_OR_EQUAL, operator.ge, operator.ge
    ),
    MatchMode.LESS_THAN: OperatorRule(
        MatchMode.LESS_THAN, operator.lt, operator.lt
    ),
    MatchMode.LESS_THAN_OR_EQUAL: OperatorRule(
        MatchMode.LESS_THAN_OR_EQUAL, operator.le, operator.le
    ),
    MatchMode.CONTAINS: OperatorRule(
        MatchMode.CONTAINS,
        lambda text, literal: literal in text,
        lambda column, literal: column.contains(literal, autoescape=True),
    ),
    MatchMode.STARTS_WITH: OperatorRule(
        MatchMode.STARTS_WITH,
        lambda text, literal: text.startswith(literal),
        lambda column, literal: column.startswith(literal, autoescape=True),
    ),
    MatchMode.ENDS_WITH: OperatorRule(
        MatchMode.ENDS_WITH,
        lambda text, literal: text.endswith(literal),
        lambda column, literal: column.endswith(literal, autoescape=True),
    ),
}


def _normalize_tag(tag: str) -> str:
    return tag.strip().lower().replace("_", "").replace("-", "").replace(" ", "")


_MATCH_MODE_LOOKUP: dict[str, MatchMode] = {}
for _mode in MatchMode:
    _MATCH_MODE_LOOKUP[_normalize_tag(_mode.value)] = _mode
    _MATCH_MODE_LOOKUP[_normalize_tag(_mode.name)] = _mode


def parse_match_mode(tag: Any) -> MatchMode:
    """
    Resolve an operator tag to a MatchMode.

    Accepts MatchMode members, canonical tags (`greater-or-equal`), member
    names in any case or separator style (`GreaterThanOrEqual`,
    `greater_than_or_equal`) and the symbols `= == != <> > >= < <=`.

    Raises:
        UnsupportedOperatorError: If the tag names no catalog operator.
    """
    if isinstance(tag, MatchMode):
        return tag
    if isinstance(tag, str):
        symbol = MATCH_MODE_SYMBOLS.get(tag.strip())
        if symbol is not None:
            return symbol
        mode = _MATCH_MODE_LOOKUP.get(_normalize_tag(tag))
        if mode is not None:
            return mode
    raise UnsupportedOperatorError(tag)


@dataclass(frozen=True)
class FieldCondition:
    """One field restricted by one operator and an already-coerced literal."""

    field: ResolvedField
    rule: OperatorRule
    value: Any

    def matches(self, record: Any) -> bool:
        current = self.field.get(record)
        if self.value is None:
            is_null = current is None
            return is_null if self.rule.mode is MatchMode.EQUALS else not is_null
        if current is None:
            return self.rule.mode is MatchMode.NOT_EQUALS
        if self.rule.textual:
            current, literal = to_text(current), self.value
        else:
            current, literal = comparable(current, self.value)
        try:
            return bool(self.rule.evaluate(current, literal))
        except TypeError:
            raise FilterValueTypeMismatchError(
                self.field.name, type(current).__name__, self.value
            )

    def to_clause(self) -> ColumnElement:
        column = self.field.require_column()
        if self.value is None:
            if self.rule.mode is MatchMode.EQUALS:
                return column.is_(None)
            return column.is_not(None)
        value = self.value
        if self.rule.textual:
            column = _text_form(column, self.field.python_type)
        elif isinstance(value, datetime):
            value = bind_datetime(value, getattr(column.type, "timezone", False))
        return self.rule.render(column, value)


def build_condition(field: ResolvedField, mode: Any, value: Any) -> FieldCondition:
    """
    Build a per-field condition.

    Exact and relational operators coerce the literal into the field's
    native type; text operators coerce it to text and compare against the
    field's textual form at evaluation time.

    Raises:
        UnsupportedOperatorError: If the operator tag is not in the catalog.
        FilterValueTypeMismatchError: If the literal cannot be coerced.
    """
    rule = OPERATOR_CATALOG[parse_match_mode(mode)]
    if rule.textual:
        return FieldCondition(field, rule, coerce_text(field, value))
    if value is None and rule.mode not in NULLABLE_MATCH_MODES:
        raise FilterValueTypeMismatchError(field.name, "non-null value", value)
    return FieldCondition(field, rule, coerce_value(field, value))

