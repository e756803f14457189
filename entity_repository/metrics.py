"""
Prometheus metrics for paginated queries.

All series are labelled by entity type name. Registration is idempotent:
importing this module twice (test runners, --reload servers, several
packages vendoring the same registry) reuses the collectors already in the
default registry instead of raising a duplicate-timeseries error.

Exposed series:
- entity_query_duration_seconds{entity}: compose + count + fetch + project
- entity_query_errors_total{entity,error_type}: rejected or failed queries;
  error_type is the library error code or the source exception class name
- entity_query_rows_total{entity}: items returned in result pages
"""

from typing import Any, TypeVar

from prometheus_client import REGISTRY, Counter, Histogram

M = TypeVar("M", Counter, Histogram)

QUERY_DURATION_BUCKETS = (
    0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5,
)


def _registered(
    metric_type: type[M],
    name: str,
    doc: str,
    labels: list[str],
    **kwargs: Any,
) -> M:
    """
    Create a collector, or return the one already registered under `name`.

    Raises:
        TypeError: If `name` is registered with a different collector type.
    """
    try:
        return metric_type(name, doc, labels, **kwargs)
    except ValueError:
        existing = REGISTRY._names_to_collectors[name]
        if not isinstance(existing, metric_type):
            raise TypeError(
                f"Metric {name} is already registered as "
                f"{type(existing).__name__}"
            )
        return existing


query_duration_seconds = _registered(
    Histogram,
    "entity_query_duration_seconds",
    "Paginated query duration in seconds",
    ["entity"],
    buckets=QUERY_DURATION_BUCKETS,
)

query_errors_total = _registered(
    Counter,
    "entity_query_errors_total",
    "Paginated queries that were rejected or failed",
    ["entity", "error_type"],
)

query_rows_total = _registered(
    Counter,
    "entity_query_rows_total",
    "Rows returned in result pages",
    ["entity"],
)
