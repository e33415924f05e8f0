"""
Response models for the log search endpoint.

A usable response is a JSON object with ``logs`` and ``count``. Missing or
invalid members fall back to an empty page and a zero count, and only log
entries that are not objects are dropped. A body that is not a JSON object
at all is a malformed response.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import SearchResponseError
from ..utils.logging import get_logger
from .log_record import LogRecord

logger = get_logger(__name__)


def _coerce_count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float) and value.is_integer():
        return max(int(value), 0)
    return 0


class LogSearchResult(BaseModel):
    """One page of search results plus the total number of matches."""

    model_config = ConfigDict(frozen=True)

    logs: tuple[LogRecord, ...] = Field(
        default_factory=tuple,
        description="Records of the requested page, in server order"
    )

    count: int = Field(
        0,
        ge=0,
        description="Total number of matches across all pages"
    )

    skipped: int = Field(
        0,
        ge=0,
        description="Entries dropped because they were not JSON objects"
    )

    @classmethod
    def from_payload(cls, payload: Any) -> "LogSearchResult":
        """
        Build a result from a decoded JSON body.

        Raises:
            SearchResponseError: If the payload is not a JSON object
        """
        if not isinstance(payload, dict):
            raise SearchResponseError(
                f"Malformed response: expected a JSON object, got {type(payload).__name__}"
            )

        raw_logs = payload.get("logs")
        if raw_logs is not None and not isinstance(raw_logs, list):
            logger.warning(
                "Response 'logs' is not a list, treating as empty",
                extra={"logs_type": type(raw_logs).__name__},
            )
            raw_logs = None

        records: list[LogRecord] = []
        skipped = 0
        for position, item in enumerate(raw_logs or []):
            if not isinstance(item, dict):
                skipped += 1
                logger.warning("Skipping non-object log entry", extra={"position": position})
                continue
            records.append(LogRecord.model_validate(item))

        count = _coerce_count(payload.get("count"))
        # A total below the page size contradicts the page just received
        count = max(count, len(records))

        return cls(logs=tuple(records), count=count, skipped=skipped)


class IngestResult(BaseModel):
    """Acknowledgement returned by the ingestion endpoint."""

    status: str = Field(
        "",
        description="Server status message"
    )
