"""
Pagination contract shared by the query pipeline and its callers.

Descriptors are frozen pydantic models built fresh per request:

- FieldFilter: one (operator, value) restriction on a field
- SortDescriptor: optional sort field plus direction
- PageDescriptor: 1-based page number and page size
- PaginationQuery: the flat request shape combining all three

PaginationResult is produced once per query and handed to the caller.

Example:
    >>> query = PaginationQuery(
    ...     page_number=1,
    ...     page_size=3,
    ...     sort_field="price",
    ...     sort_direction="asc",
    ...     filters={"description": {"operator": "contains", "value": "Software"}},
    ... )
    >>> query.page
    PageDescriptor(page_number=1, page_size=3)
"""

import math
from typing import Any, Generic, Mapping, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from entity_repository.constants import (
    FIRST_PAGE_NUMBER,
    MIN_PAGE_SIZE,
    SORT_DIRECTION_ALIASES,
    MatchMode,
    SortDirection,
)
from entity_repository.exceptions import InvalidSortDirectionError
from entity_repository.query.operators import parse_match_mode
from entity_repository.settings import app_settings

S = TypeVar("S")


def parse_sort_direction(value: Any) -> SortDirection:
    """
    Resolve a sort direction; None means ascending.

    Raises:
        InvalidSortDirectionError: For anything but asc/ascending/desc/descending.
    """
    if value is None:
        return SortDirection.ASC
    if isinstance(value, SortDirection):
        return value
    if isinstance(value, str):
        direction = SORT_DIRECTION_ALIASES.get(value.strip().lower())
        if direction is not None:
            return direction
    raise InvalidSortDirectionError(value)


def _configured_page_size() -> int:
    return app_settings.DEFAULT_PAGE_SIZE


def _page_number_or_default(value: Any) -> Any:
    return FIRST_PAGE_NUMBER if value is None else value


def _page_size_or_default(value: Any) -> Any:
    return _configured_page_size() if value is None else value


def _clamp_page_number(value: int) -> int:
    return max(value, FIRST_PAGE_NUMBER)


def _clamp_page_size(value: int) -> int:
    return value if value >= MIN_PAGE_SIZE else _configured_page_size()


class FieldFilter(BaseModel):
    """
    Restriction of one field.

    Attributes:
        operator: Catalog operator; tags, member names and symbols are
            accepted on input.
        value: Opaque literal coerced to the field's type at compose time.
    """

    model_config = ConfigDict(frozen=True)

    operator: MatchMode
    value: Any = None

    @field_validator("operator", mode="before")
    @classmethod
    def _parse_operator(cls, value: Any) -> MatchMode:
        return parse_match_mode(value)


FilterDescriptor = Mapping[str, FieldFilter]


class SortDescriptor(BaseModel):
    """Optional sort field and its direction (ascending by default)."""

    model_config = ConfigDict(frozen=True)

    field: str | None = None
    direction: SortDirection = SortDirection.ASC

    @field_validator("direction", mode="before")
    @classmethod
    def _parse_direction(cls, value: Any) -> SortDirection:
        return parse_sort_direction(value)


class PageDescriptor(BaseModel):
    """
    Page window.

    Page numbers below 1 are clamped to 1; page sizes below 1 fall back to
    the configured DEFAULT_PAGE_SIZE.
    """

    model_config = ConfigDict(frozen=True)

    page_number: int = FIRST_PAGE_NUMBER
    page_size: int = Field(default_factory=_configured_page_size)

    @field_validator("page_number", mode="before")
    @classmethod
    def _page_number_before(cls, value: Any) -> Any:
        return _page_number_or_default(value)

    @field_validator("page_number")
    @classmethod
    def _page_number_after(cls, value: int) -> int:
        return _clamp_page_number(value)

    @field_validator("page_size", mode="before")
    @classmethod
    def _page_size_before(cls, value: Any) -> Any:
        return _page_size_or_default(value)

    @field_validator("page_size")
    @classmethod
    def _page_size_after(cls, value: int) -> int:
        return _clamp_page_size(value)

    @property
    def skip(self) -> int:
        """Number of records preceding this page."""
        return (self.page_number - 1) * self.page_size


class PaginationQuery(BaseModel):
    """
    Pagination, sorting and filtering options for one query.

    Attributes:
        page_number: 1-based page number (clamped to 1).
        page_size: Items per page (non-positive values use the default).
        sort_field: Field to order by; None leaves ordering to the source.
        sort_direction: Ascending unless stated otherwise.
        filters: Field name -> FieldFilter, combined with logical AND.
    """

    model_config = ConfigDict(frozen=True)

    page_number: int = FIRST_PAGE_NUMBER
    page_size: int = Field(default_factory=_configured_page_size)
    sort_field: str | None = None
    sort_direction: SortDirection = SortDirection.ASC
    filters: dict[str, FieldFilter] | None = None

    @field_validator("page_number", mode="before")
    @classmethod
    def _page_number_before(cls, value: Any) -> Any:
        return _page_number_or_default(value)

    @field_validator("page_number")
    @classmethod
    def _page_number_after(cls, value: int) -> int:
        return _clamp_page_number(value)

    @field_validator("page_size", mode="before")
    @classmethod
    def _page_size_before(cls, value: Any) -> Any:
        return _page_size_or_default(value)

    @field_validator("page_size")
    @classmethod
    def _page_size_after(cls, value: int) -> int:
        return _clamp_page_size(value)

    @field_validator("sort_direction", mode="before")
    @classmethod
    def _parse_direction(cls, value: Any) -> SortDirection:
        return parse_sort_direction(value)

    @property
    def page(self) -> PageDescriptor:
        return PageDescriptor(
            page_number=self.page_number, page_size=self.page_size
        )

    @property
    def sort(self) -> SortDescriptor:
        return SortDescriptor(
            field=self.sort_field, direction=self.sort_direction
        )


class PaginationResult(BaseModel, Generic[S]):
    """
    One page of projected results and its metadata.

    Attributes:
        items: Projected records of the requested page, in order.
        count: Number of items on this page.
        total_count: Records matching the filters, ignoring paging.
        page_number: Echoed page number.
        page_size: Echoed page size.
    """

    items: list[S] = Field(default_factory=list)
    count: int = Field(ge=0)
    total_count: int = Field(ge=0)
    page_number: int = Field(ge=1)
    page_size: int = Field(ge=1)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_next_page(self) -> bool:
        return self.page_number * self.page_size < self.total_count

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @model_validator(mode="after")
    def _check_counts(self) -> "PaginationResult[S]":
        if self.count != len(self.items):
            raise ValueError(
                f"count ({self.count}) does not match number of items ({len(self.items)})"
            )
        if self.count > self.page_size:
            raise ValueError(
                f"count ({self.count}) exceeds page size ({self.page_size})"
            )
        if self.count > self.total_count:
            raise ValueError(
                f"count ({self.count}) exceeds total count ({self.total_count})"
            )
        return self
