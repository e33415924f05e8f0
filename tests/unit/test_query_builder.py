"""
Tests for filter criteria normalization and query construction.
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from logscope.exceptions import SearchValidationError
from logscope.models.query import (
    FILTER_FIELDS,
    PAGE_SIZE,
    FilterCriteria,
    build_log_query,
    format_instant,
)


class TestFormatInstant:
    """Test rendering of time bounds."""

    def test_utc_millisecond_precision(self):
        value = datetime(2024, 1, 15, 10, 30, 45, 123456, tzinfo=UTC)
        assert format_instant(value) == "2024-01-15T10:30:45.123Z"

    def test_offset_converted_to_utc(self):
        value = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_instant(value) == "2024-01-15T10:00:00.000Z"

    def test_naive_value_is_local_time(self):
        naive = datetime(2024, 6, 1, 8, 15)
        assert format_instant(naive) == format_instant(naive.astimezone())


class TestFilterCriteria:
    """Test FilterCriteria normalization."""

    def test_empty_criteria(self):
        criteria = FilterCriteria()
        assert criteria.is_empty
        assert criteria.wire_values() == []

    def test_text_is_trimmed(self):
        criteria = FilterCriteria(search="  timeout  ", level=" error")
        assert criteria.search == "timeout"
        assert criteria.level == "error"

    def test_whitespace_only_is_absent(self):
        criteria = FilterCriteria(search="   ", commit="\t")
        assert criteria.search is None
        assert criteria.commit is None
        assert criteria.is_empty

    def test_level_casing_preserved(self):
        assert FilterCriteria(level="ERROR").wire_values() == [("level", "ERROR")]

    def test_wire_aliases_accepted(self):
        criteria = FilterCriteria(resourceId="server-1234", traceId="trace-abc")
        assert criteria.resource_id == "server-1234"
        assert criteria.trace_id == "trace-abc"

    def test_regex_not_validated(self):
        criteria = FilterCriteria(regex="[unclosed")
        assert criteria.wire_values() == [("regex", "[unclosed")]

    def test_time_bounds_from_strings(self):
        criteria = FilterCriteria(start_time="2024-01-15T10:30:00Z", end_time="  ")
        assert criteria.start_time == datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
        assert criteria.end_time is None
        assert criteria.wire_values() == [("startTime", "2024-01-15T10:30:00.000Z")]

    def test_invalid_time_rejected(self):
        with pytest.raises(ValidationError):
            FilterCriteria(start_time="yesterday-ish")

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            FilterCriteria(host="web-01")

    def test_criteria_is_immutable(self):
        criteria = FilterCriteria(level="error")
        with pytest.raises(ValidationError):
            criteria.level = "info"


class TestBuildLogQuery:
    """Test build_log_query parameter construction."""

    def test_empty_criteria_only_pagination(self):
        query = build_log_query(FilterCriteria())
        assert query.params == (("page", "1"), ("limit", str(PAGE_SIZE)))

    def test_level_and_resource(self):
        criteria = FilterCriteria(level="error", resource_id="server-1234")
        query = build_log_query(criteria, page=2)
        assert query.as_dict() == {
            "level": "error",
            "resourceId": "server-1234",
            "page": "2",
            "limit": "10",
        }

    def test_canonical_order(self):
        criteria = FilterCriteria(
            message="boom",
            regex="x+",
            end_time=datetime(2024, 1, 2, tzinfo=UTC),
            start_time=datetime(2024, 1, 1, tzinfo=UTC),
            parent_resource_id="cluster-1",
            commit="5e5342f",
            span_id="span-1",
            trace_id="trace-1",
            resource_id="server-1",
            level="info",
            search="db",
        )
        keys = [name for name, _ in build_log_query(criteria).params]
        assert keys == list(FILTER_FIELDS.values()) + ["page", "limit"]

    def test_query_string(self):
        query = build_log_query(FilterCriteria(level="error", search="db down"))
        assert query.to_query_string() == "search=db+down&level=error&page=1&limit=10"

    @pytest.mark.parametrize("page", [0, -1, 1.5, "2", True])
    def test_invalid_page(self, page):
        with pytest.raises(SearchValidationError) as exc_info:
            build_log_query(FilterCriteria(), page=page)
        assert exc_info.value.context["field"] == "page"

    @pytest.mark.parametrize("limit", [0, -10, None])
    def test_invalid_limit(self, limit):
        with pytest.raises(SearchValidationError):
            build_log_query(FilterCriteria(), limit=limit)


text_values = st.one_of(st.none(), st.text(max_size=30))


class TestQueryProperties:
    """Property-based checks of query construction."""

    @given(value=st.text(max_size=40))
    def test_trimmed_or_absent(self, value):
        criteria = FilterCriteria(search=value)
        stripped = value.strip()
        assert criteria.search == (stripped or None)

    @given(
        search=text_values,
        level=text_values,
        resource_id=text_values,
        page=st.integers(min_value=1, max_value=10_000),
    )
    def test_deterministic(self, search, level, resource_id, page):
        first = build_log_query(FilterCriteria(search=search, level=level, resource_id=resource_id), page)
        second = build_log_query(FilterCriteria(search=search, level=level, resource_id=resource_id), page)
        assert first.params == second.params

    @given(
        search=text_values,
        commit=text_values,
        page=st.integers(min_value=1, max_value=10_000),
        limit=st.integers(min_value=1, max_value=500),
    )
    def test_pagination_always_last(self, search, commit, page, limit):
        query = build_log_query(FilterCriteria(search=search, commit=commit), page, limit)
        assert query.params[-2:] == (("page", str(page)), ("limit", str(limit)))
        for name, value in query.params[:-2]:
            assert value == value.strip()
            assert value

    @given(blank=st.text(alphabet=" \t\n", max_size=5))
    def test_blank_inputs_send_only_pagination(self, blank):
        criteria = FilterCriteria(**{name: blank for name in FILTER_FIELDS})
        assert build_log_query(criteria).params == (("page", "1"), ("limit", "10"))
