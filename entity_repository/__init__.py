"""
entity-repository: dynamic, string-keyed filtering, sorting and paging for
typed entity collections.
"""

from entity_repository.constants import MatchMode, SortDirection
from entity_repository.exceptions import (
    AppException,
    EntityNotFoundError,
    FilterValueTypeMismatchError,
    InvalidSortDirectionError,
    QueryValidationError,
    UnknownFieldError,
    UnsupportedOperatorError,
)
from entity_repository.models.base import Entity
from entity_repository.projection import IdentityProjector, ModelProjector
from entity_repository.query.pipeline import QueryPipeline, run_query
from entity_repository.repositories.base import EntityRepository
from entity_repository.schemas.pagination import (
    FieldFilter,
    PageDescriptor,
    PaginationQuery,
    PaginationResult,
    SortDescriptor,
)
from entity_repository.storage import MemorySource, SelectSource

__version__ = "0.1.0"

__all__ = [
    "AppException",
    "Entity",
    "EntityNotFoundError",
    "EntityRepository",
    "FieldFilter",
    "FilterValueTypeMismatchError",
    "IdentityProjector",
    "InvalidSortDirectionError",
    "MatchMode",
    "MemorySource",
    "ModelProjector",
    "PageDescriptor",
    "PaginationQuery",
    "PaginationResult",
    "QueryPipeline",
    "QueryValidationError",
    "SelectSource",
    "SortDescriptor",
    "SortDirection",
    "UnknownFieldError",
    "UnsupportedOperatorError",
    "run_query",
]
