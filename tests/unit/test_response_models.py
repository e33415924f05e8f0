"""
Tests for search response parsing.
"""

import pytest

from logscope.exceptions import ErrorCategory, SearchResponseError
from logscope.models.response import IngestResult, LogSearchResult
from tests.factories import create_log_payloads, create_search_response


class TestLogSearchResult:
    """Test LogSearchResult.from_payload."""

    def test_well_formed_page(self):
        logs = create_log_payloads(10, level="error")
        result = LogSearchResult.from_payload(create_search_response(logs, count=25))

        assert len(result.logs) == 10
        assert result.count == 25
        assert result.skipped == 0
        assert [record.message for record in result.logs] == [log["message"] for log in logs]

    def test_empty_result(self):
        result = LogSearchResult.from_payload({"logs": [], "count": 0})
        assert result.logs == ()
        assert result.count == 0

    def test_missing_members_default_to_empty(self):
        result = LogSearchResult.from_payload({})
        assert result.logs == ()
        assert result.count == 0

    def test_null_logs(self):
        result = LogSearchResult.from_payload({"logs": None, "count": 3})
        assert result.logs == ()
        assert result.count == 3

    def test_logs_not_a_list(self):
        result = LogSearchResult.from_payload({"logs": "oops", "count": 0})
        assert result.logs == ()

    @pytest.mark.parametrize("count", ["12", None, -4, True, 2.5, [1]])
    def test_invalid_count_is_zero(self, count):
        result = LogSearchResult.from_payload({"logs": [], "count": count})
        assert result.count == 0

    def test_integral_float_count(self):
        assert LogSearchResult.from_payload({"logs": [], "count": 30.0}).count == 30

    def test_count_never_below_page_length(self):
        result = LogSearchResult.from_payload({"logs": create_log_payloads(3), "count": 1})
        assert result.count == 3

    def test_only_non_object_entries_skipped(self):
        logs = create_log_payloads(2)
        payload = {"logs": [logs[0], "not a record", None, logs[1]], "count": 4}
        result = LogSearchResult.from_payload(payload)

        assert len(result.logs) == 2
        assert result.skipped == 2
        assert result.count == 4

    def test_irregular_records_kept(self):
        logs = create_log_payloads(2)
        odd_id = {"level": "error", "message": "odd id", "resourceId": 42}
        odd_time = {"level": "info", "message": "odd time", "timestamp": "not a time"}
        payload = {"logs": [logs[0], odd_id, odd_time, logs[1]], "count": 4}

        result = LogSearchResult.from_payload(payload)

        assert len(result.logs) == 4
        assert result.skipped == 0
        assert result.logs[1].resource_id == "42"
        assert result.logs[2].timestamp == "not a time"
        assert [record.message for record in result.logs] == [item["message"] for item in payload["logs"]]

    @pytest.mark.parametrize("payload", [[1, 2, 3], "text", None, 42])
    def test_non_object_body_is_malformed(self, payload):
        with pytest.raises(SearchResponseError) as exc_info:
            LogSearchResult.from_payload(payload)
        assert exc_info.value.category == ErrorCategory.RESPONSE
        assert "Malformed response" in exc_info.value.message


class TestIngestResult:
    def test_default_status(self):
        assert IngestResult().status == ""

    def test_status(self):
        assert IngestResult(status="Log ingested successfully").status == "Log ingested successfully"
