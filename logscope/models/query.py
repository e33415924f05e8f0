"""
Search criteria and query construction.

``FilterCriteria`` holds the user's constraints, normalized on construction.
``build_log_query`` maps criteria plus a page cursor to the canonical,
ordered set of query parameters sent to ``GET /logs``.
"""

from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import SearchValidationError

PAGE_SIZE = 10

# Attribute name -> wire name, in transmission order
FILTER_FIELDS: dict[str, str] = {
    "search": "search",
    "level": "level",
    "resource_id": "resourceId",
    "trace_id": "traceId",
    "span_id": "spanId",
    "commit": "commit",
    "parent_resource_id": "parentResourceId",
    "start_time": "startTime",
    "end_time": "endTime",
    "regex": "regex",
    "message": "message",
}

TIME_FIELDS = ("start_time", "end_time")
TEXT_FIELDS = tuple(name for name in FILTER_FIELDS if name not in TIME_FIELDS)


def format_instant(value: datetime) -> str:
    """
    Render a datetime as an absolute UTC instant, millisecond precision.

    Naive datetimes are local input and are interpreted in the local timezone.
    """
    if value.tzinfo is None:
        value = value.astimezone()
    value = value.astimezone(UTC)
    return f"{value:%Y-%m-%dT%H:%M:%S}.{value.microsecond // 1000:03d}Z"


class FilterCriteria(BaseModel):
    """
    User-specified constraints for a log search.

    Every field is optional; ``None`` means no constraint. Text is trimmed
    and whitespace-only input is treated as absent.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="forbid",
    )

    search: str | None = Field(
        None,
        description="Full-text search",
        examples=["timeout"]
    )

    level: str | None = Field(
        None,
        description="Log level to match",
        examples=["error", "ERROR"]
    )

    resource_id: str | None = Field(None, alias="resourceId")
    trace_id: str | None = Field(None, alias="traceId")
    span_id: str | None = Field(None, alias="spanId")
    commit: str | None = Field(None)
    parent_resource_id: str | None = Field(None, alias="parentResourceId")

    start_time: datetime | None = Field(
        None,
        alias="startTime",
        description="Lower time bound; naive values are local time"
    )

    end_time: datetime | None = Field(
        None,
        alias="endTime",
        description="Upper time bound; naive values are local time"
    )

    regex: str | None = Field(
        None,
        description="Pattern matched by the server, not validated here",
        examples=[r"user-\d+"]
    )

    message: str | None = Field(
        None,
        description="Substring the message must contain"
    )

    @field_validator(*TEXT_FIELDS, mode='before')
    @classmethod
    def trim_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        text = (v if isinstance(v, str) else str(v)).strip()
        return text or None

    @field_validator(*TIME_FIELDS, mode='before')
    @classmethod
    def blank_time_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @property
    def is_empty(self) -> bool:
        """True when no constraint is set."""
        return all(getattr(self, name) is None for name in FILTER_FIELDS)

    def wire_values(self) -> list[tuple[str, str]]:
        """Present constraints as ``(wire_name, value)`` pairs in canonical order."""
        values: list[tuple[str, str]] = []
        for name, wire_name in FILTER_FIELDS.items():
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, datetime):
                values.append((wire_name, format_instant(value)))
            else:
                values.append((wire_name, value))
        return values


class LogQuery(BaseModel):
    """
    A fully built search request: criteria, page cursor and the exact
    parameters derived from them.
    """

    model_config = ConfigDict(frozen=True)

    criteria: FilterCriteria
    page: int
    limit: int
    params: tuple[tuple[str, str], ...]

    def as_dict(self) -> dict[str, str]:
        return dict(self.params)

    def to_query_string(self) -> str:
        """URL-encoded query string, e.g. ``level=error&page=1&limit=10``."""
        return urlencode(self.params)


def build_log_query(
    criteria: FilterCriteria,
    page: int = 1,
    limit: int = PAGE_SIZE,
) -> LogQuery:
    """
    Build the query for one page of results.

    The same criteria, page and limit always produce the same parameters
    in the same order; ``page`` and ``limit`` are always present.

    Args:
        criteria: Normalized filter criteria
        page: 1-based page number
        limit: Page size

    Returns:
        The built query

    Raises:
        SearchValidationError: If page or limit is not a positive integer
    """
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise SearchValidationError("Page must be a positive integer", field="page", value=page)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise SearchValidationError("Limit must be a positive integer", field="limit", value=limit)

    params = criteria.wire_values()
    params.append(("page", str(page)))
    params.append(("limit", str(limit)))

    return LogQuery(criteria=criteria, page=page, limit=limit, params=tuple(params))
