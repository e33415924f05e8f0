"""
Data models for logscope.

This module contains Pydantic models for log records, search criteria,
built queries and search responses.
"""

from .log_record import UNKNOWN_LEVEL_STYLE, LogLevel, LogRecord
from .query import (
    FILTER_FIELDS,
    PAGE_SIZE,
    FilterCriteria,
    LogQuery,
    build_log_query,
    format_instant,
)
from .response import IngestResult, LogSearchResult

__all__ = [
    # Log record models
    "LogLevel",
    "LogRecord",
    "UNKNOWN_LEVEL_STYLE",
    # Query models
    "FILTER_FIELDS",
    "PAGE_SIZE",
    "FilterCriteria",
    "LogQuery",
    "build_log_query",
    "format_instant",
    # Response models
    "LogSearchResult",
    "IngestResult",
]
