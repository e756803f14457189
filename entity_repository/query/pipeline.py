"""
Query pipeline: filter, order, count, page, project.

The pipeline turns runtime descriptors into one page of projected results:

1. Compose the predicate and the ordering. Any composition failure aborts
   here, before the data source is touched.
2. Restrict the source with the predicate.
3. Order the filtered view (or leave it in natural order).
4. Count the filtered view, before paging.
5. Skip `(page_number - 1) * page_size` records and take `page_size`.
6. Project the page and wrap it in a PaginationResult.

Count and fetch run sequentially against the same filtered view. If the
awaiting task is cancelled during either step the cancellation propagates
and no partial result is returned.

Example:
    ```python
    from entity_repository.query.pipeline import run_query
    from entity_repository.schemas.pagination import PaginationQuery
    from entity_repository.storage import SelectSource

    query = PaginationQuery(
        page_number=1,
        page_size=3,
        sort_field="price",
        filters={"price": {"operator": "less-than", "value": 100}},
    )
    async with async_session() as session:
        page = await run_query(SelectSource(session, Product), Product, query)
    ```
"""

import time
from typing import Any, Generic, Mapping, TypeVar

from entity_repository.constants import SortDirection
from entity_repository.exceptions import AppException, QueryValidationError
from entity_repository.logging import logger, query_log_context
from entity_repository.metrics import (
    query_duration_seconds,
    query_errors_total,
    query_rows_total,
)
from entity_repository.protocols import Projector, QueryableSource
from entity_repository.projection import IdentityProjector
from entity_repository.query.fields import describe_fields
from entity_repository.query.ordering import Ordering, compose_ordering
from entity_repository.query.predicates import Predicate, compose_predicate
from entity_repository.schemas.pagination import (
    FieldFilter,
    PageDescriptor,
    PaginationQuery,
    PaginationResult,
    SortDescriptor,
)
from entity_repository.settings import app_settings

T = TypeVar("T")


class QueryPipeline(Generic[T]):
    """
    Orchestrates one paginated query over an entity type.

    The pipeline holds no per-query state, so one instance can serve
    concurrent queries.

    Attributes:
        model: Entity type whose fields filters and sorts refer to.
        stable_default_order: When True, queries without a sort field are
            ordered ascending by `default_order_field`.
        default_order_field: Field used for the stable default ordering.
    """

    def __init__(
        self,
        model: type[T],
        stable_default_order: bool | None = None,
        default_order_field: str | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            model: Entity type to query.
            stable_default_order: Overrides STABLE_DEFAULT_ORDER.
            default_order_field: Overrides DEFAULT_ORDER_FIELD.
        """
        self.model = model
        self.stable_default_order = (
            app_settings.STABLE_DEFAULT_ORDER
            if stable_default_order is None
            else stable_default_order
        )
        self.default_order_field = (
            default_order_field or app_settings.DEFAULT_ORDER_FIELD
        )

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    def _default_ordering(self) -> Ordering | None:
        if not self.stable_default_order:
            return None
        field = describe_fields(self.model).get(self.default_order_field)
        if field is None:
            return None
        return Ordering(field, SortDirection.ASC)

    def compose(
        self,
        filters: Mapping[str, FieldFilter | Mapping[str, Any]] | None,
        sort: SortDescriptor | None,
    ) -> tuple[Predicate, Ordering | None]:
        """
        Compose predicate and ordering without touching any source.

        Raises:
            QueryValidationError: If a filter or the sort field is invalid.
        """
        predicate = compose_predicate(self.model, filters)
        ordering = compose_ordering(self.model, sort) or self._default_ordering()
        return predicate, ordering

    async def run(
        self,
        source: QueryableSource[T],
        filters: Mapping[str, FieldFilter | Mapping[str, Any]] | None = None,
        sort: SortDescriptor | None = None,
        page: PageDescriptor | None = None,
        projector: Projector[T, Any] | None = None,
    ) -> PaginationResult[Any]:
        """
        Run the pipeline against a source.

        Args:
            source: Queryable view over the entity's records.
            filters: Field name -> FieldFilter, combined with logical AND.
            sort: Sort descriptor; None or no field means natural order.
            page: Page window; defaults to the first page of default size.
            projector: Maps records to caller-facing shapes; records are
                returned unchanged when omitted.

        Returns:
            PaginationResult with the projected page and the total count of
            the filtered set.

        Raises:
            QueryValidationError: Before any source interaction, when the
                descriptors cannot be composed.
            Exception: Whatever the source raises, unchanged.
        """
        page = page or PageDescriptor()
        projector = projector or IdentityProjector()
        with query_log_context(entity=self.entity_name):
            return await self._run(source, filters, sort, page, projector)

    async def _run(
        self,
        source: QueryableSource[T],
        filters: Mapping[str, FieldFilter | Mapping[str, Any]] | None,
        sort: SortDescriptor | None,
        page: PageDescriptor,
        projector: Projector[T, Any],
    ) -> PaginationResult[Any]:
        started = time.perf_counter()
        try:
            predicate, ordering = self.compose(filters, sort)
        except QueryValidationError as ex:
            query_errors_total.labels(
                entity=self.entity_name, error_type=ex.code
            ).inc()
            logger.warning(f"Rejected {self.entity_name} query: {ex.message}")
            raise

        logger.debug(
            f"Querying {self.entity_name}: "
            f"{len(predicate.conditions)} condition(s), "
            f"order={ordering.field.name if ordering else None}, "
            f"page={page.page_number}, size={page.page_size}"
        )

        try:
            filtered = source.where(predicate)
            ordered = filtered.order_by(ordering) if ordering else filtered
            total_count = await filtered.count()
            records = await ordered.slice(page.skip, page.page_size).fetch()
        except Exception as ex:
            error_type = (
                ex.code if isinstance(ex, AppException) else type(ex).__name__
            )
            query_errors_total.labels(
                entity=self.entity_name, error_type=error_type
            ).inc()
            raise

        items = projector.project_many(records)
        query_duration_seconds.labels(entity=self.entity_name).observe(
            time.perf_counter() - started
        )
        query_rows_total.labels(entity=self.entity_name).inc(len(items))

        return PaginationResult(
            items=items,
            count=len(items),
            total_count=total_count,
            page_number=page.page_number,
            page_size=page.page_size,
        )

    async def run_query(
        self,
        source: QueryableSource[T],
        query: PaginationQuery,
        projector: Projector[T, Any] | None = None,
    ) -> PaginationResult[Any]:
        """Run the pipeline with a flat PaginationQuery."""
        return await self.run(
            source,
            filters=query.filters,
            sort=query.sort,
            page=query.page,
            projector=projector,
        )


async def run_query(
    source: QueryableSource[T],
    model: type[T],
    query: PaginationQuery,
    projector: Projector[T, Any] | None = None,
) -> PaginationResult[Any]:
    """
    Run one paginated query with a default-configured pipeline.

    Args:
        source: Queryable view over the entity's records.
        model: Entity type the query's field names refer to.
        query: Page, sort and filter options.
        projector: Optional record-to-shape projector.

    Returns:
        PaginationResult for the requested page.
    """
    return await QueryPipeline(model).run_query(source, query, projector)
