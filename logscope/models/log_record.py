"""
Log record models as returned by the log search server.

Records are immutable once parsed. Unknown fields are preserved so the
detail view can show the full record, and unknown levels are displayed
as received with a neutral style instead of failing validation.
"""

import copy
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_core import to_jsonable_python


class LogLevel(str, Enum):
    """
    Known log levels.

    Parsing is case-insensitive and accepts common aliases; values outside
    this set are not an error, see ``LogLevel.parse``.
    """

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"

    @classmethod
    def parse(cls, value: str | None) -> "LogLevel | None":
        """
        Map a level string to a known level.

        Args:
            value: Level as received from the server or typed by the user

        Returns:
            The matching LogLevel, or None when the value is unrecognized
        """
        if not value:
            return None

        normalized = value.strip().upper()
        alias_map = {
            "WARNING": cls.WARN,
            "ERR": cls.ERROR,
            "CRITICAL": cls.FATAL,
            "CRIT": cls.FATAL,
            "NOTICE": cls.INFO,
            "INFORMATION": cls.INFO,
            "INFORMATIONAL": cls.INFO,
            "TRACE": cls.DEBUG,
        }
        if normalized in alias_map:
            return alias_map[normalized]

        for level in cls:
            if level.value == normalized:
                return level
        return None

    @property
    def style(self) -> str:
        """CSS-like style class for the level badge."""
        return self.value.lower()


UNKNOWN_LEVEL_STYLE = "unknown"

_TIMESTAMP_ADAPTER = TypeAdapter(datetime)


class LogRecord(BaseModel):
    """
    One log entry from the server.

    Standard fields use the server's camelCase names as aliases; any other
    field is kept as an extra attribute. Values that do not fit a standard
    field are kept as received rather than rejected, and the payload the
    record was built from is retained for the detail view.
    """

    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        populate_by_name=True,
    )

    level: str = Field(
        "",
        description="Log level exactly as received",
        examples=["error", "INFO", "warning"]
    )

    timestamp: datetime | str | None = Field(
        None,
        description="When the entry was produced; unparseable values stay raw strings",
        examples=["2024-01-15T10:30:45Z"]
    )

    message: str = Field(
        "",
        description="Log message content"
    )

    resource_id: str | None = Field(None, alias="resourceId")
    trace_id: str | None = Field(None, alias="traceId")
    span_id: str | None = Field(None, alias="spanId")
    commit: str | None = Field(None)

    metadata: Any = Field(
        None,
        description="Free-form metadata, e.g. parentResourceId"
    )

    _raw: dict[str, Any] | None = PrivateAttr(default=None)

    @model_validator(mode='wrap')
    @classmethod
    def keep_raw_payload(cls, data: Any, handler: Any) -> "LogRecord":
        record = handler(data)
        if isinstance(data, dict):
            raw = copy.deepcopy(data)
            for name, field in cls.model_fields.items():
                if field.alias and name in raw and field.alias not in raw:
                    raw[field.alias] = raw.pop(name)
            record._raw = raw
        return record

    @field_validator('level', 'message', mode='before')
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator('resource_id', 'trace_id', 'span_id', 'commit', mode='before')
    @classmethod
    def coerce_identifier(cls, v: Any) -> str | None:
        if v is None:
            return None
        return v if isinstance(v, str) else str(v)

    @field_validator('timestamp', mode='before')
    @classmethod
    def parse_timestamp(cls, v: Any) -> datetime | str | None:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        if isinstance(v, datetime):
            return v
        try:
            return _TIMESTAMP_ADAPTER.validate_python(v)
        except ValidationError:
            return v if isinstance(v, str) else str(v)

    @field_validator('timestamp')
    @classmethod
    def ensure_timezone(cls, v: datetime | str | None) -> datetime | str | None:
        """Timestamps without an offset are taken as UTC."""
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @property
    def parsed_timestamp(self) -> datetime | None:
        return self.timestamp if isinstance(self.timestamp, datetime) else None

    @property
    def known_level(self) -> LogLevel | None:
        return LogLevel.parse(self.level)

    @property
    def level_style(self) -> str:
        """Style class for the level badge, neutral for unknown levels."""
        level = self.known_level
        return level.style if level else UNKNOWN_LEVEL_STYLE

    def to_detail_dict(self) -> dict[str, Any]:
        """Full record as received, using the server's field names."""
        if self._raw is not None:
            return to_jsonable_python(self._raw)
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
