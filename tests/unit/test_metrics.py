"""Tests for idempotent metric registration."""

import pytest
from prometheus_client import Counter, Histogram

from entity_repository.metrics import (
    _registered,
    query_duration_seconds,
    query_errors_total,
    query_rows_total,
)


class TestRegistration:
    """Tests for collector reuse on re-registration."""

    def test_counter_reused(self):
        again = _registered(
            Counter,
            "entity_query_errors_total",
            "Paginated queries that were rejected or failed",
            ["entity", "error_type"],
        )

        assert again is query_errors_total

    def test_histogram_reused(self):
        again = _registered(
            Histogram,
            "entity_query_duration_seconds",
            "Paginated query duration in seconds",
            ["entity"],
        )

        assert again is query_duration_seconds

    def test_type_conflict_raises(self):
        with pytest.raises(TypeError):
            _registered(
                Histogram,
                "entity_query_rows_total",
                "Rows returned in result pages",
                ["entity"],
            )

    def test_rows_counter_labelled_by_entity(self):
        before = query_rows_total.labels(entity="Gadget")._value.get()

        query_rows_total.labels(entity="Gadget").inc(3)

        assert query_rows_total.labels(entity="Gadget")._value.get() == before + 3
