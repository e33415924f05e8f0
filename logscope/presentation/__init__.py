"""Presentation helpers for search results."""

from .search_view import (
    NO_RESULTS_MESSAGE,
    LogListEntry,
    PaginationControls,
    SearchView,
    build_search_view,
    format_log_detail,
    format_timestamp,
    render_text,
)

__all__ = [
    "NO_RESULTS_MESSAGE",
    "LogListEntry",
    "PaginationControls",
    "SearchView",
    "build_search_view",
    "format_log_detail",
    "format_timestamp",
    "render_text",
]
