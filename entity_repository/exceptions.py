"""
Custom exception classes for the query engine.

Every failure the library raises maps to exactly one category so callers
can build a uniform mapping to their own response layer:

- QueryValidationError and its subclasses: the request itself is malformed
  (bad request, never retried)
- EntityNotFoundError: a point lookup found no record (not found)

None of these derive from ValueError, so they propagate unchanged out of
pydantic validators. Failures raised by the data source itself are never
wrapped.
"""

from typing import Any

from entity_repository.schemas.errors import ErrorEnvelope, ErrorResponse


class AppException(Exception):
    """
    Base exception class for all library exceptions.

    Attributes:
        message: Human-readable error message.
        details: Optional structured context.
        http_status: HTTP status code a service layer should respond with.
        code: Machine-readable error code.
    """

    http_status: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize the exception with a message.

        Args:
            message: Human-readable error description.
            details: Optional structured context.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def to_error_response(self) -> ErrorResponse:
        """
        Convert the exception to an error envelope.

        Returns:
            ErrorResponse carrying code, message and details.
        """
        return ErrorResponse(
            error=ErrorEnvelope(
                code=self.code, msg=self.message, details=self.details
            )
        )


class QueryValidationError(AppException):
    """
    Query descriptor failed validation.

    Raised before the data source is touched when a filter or sort
    descriptor cannot be composed.

    HTTP Status: 400 Bad Request
    """

    http_status = 400
    code = "validation_error"


class UnknownFieldError(QueryValidationError):
    """A filter or sort field name does not exist on the entity type."""

    code = "unknown_field"

    def __init__(self, entity: str, field: str):
        self.entity = entity
        self.field = field
        super().__init__(
            f"{entity} has no field named '{field}'",
            {"entity": entity, "field": field},
        )


class FilterValueTypeMismatchError(QueryValidationError):
    """A filter literal cannot be coerced to the field's comparison type."""

    code = "filter_value_type_mismatch"

    def __init__(self, field: str, expected: str, value: Any):
        self.field = field
        self.expected = expected
        self.value = value
        super().__init__(
            f"Invalid filter value {value!r} for field '{field}' ({expected})",
            {"field": field, "expected": expected, "value": repr(value)},
        )


class UnsupportedOperatorError(QueryValidationError):
    """An operator tag outside the catalog was supplied."""

    code = "unsupported_operator"

    def __init__(self, operator: Any):
        self.operator = operator
        super().__init__(
            f"Unsupported filter operator {operator!r}",
            {"operator": repr(operator)},
        )


class InvalidSortDirectionError(QueryValidationError):
    """A sort direction other than ascending/descending was supplied."""

    code = "invalid_sort_direction"

    def __init__(self, direction: Any):
        self.direction = direction
        super().__init__(
            f"Unsupported sort direction {direction!r}",
            {"direction": repr(direction)},
        )


class EntityNotFoundError(AppException):
    """
    Entity not found.

    Raised when a point lookup or point mutation by identifier finds no
    record.

    HTTP Status: 404 Not Found
    """

    http_status = 404
    code = "not_found"

    def __init__(self, entity_type: type | str, key: Any):
        self.entity_type = entity_type
        self.key = key
        name = (
            entity_type if isinstance(entity_type, str) else entity_type.__name__
        )
        super().__init__(
            f"Entity of type {name} with key {key} was not found.",
            {"entity": name, "key": str(key)},
        )
