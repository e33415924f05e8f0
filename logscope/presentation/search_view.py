"""
Presentation of search session state.

Pure presentation logic: turns a SearchSession into the data a list view
needs (entries, count, messages, pagination controls), renders that as
plain text for the terminal, and formats a record for the detail view.
No data access happens here.
"""

import json
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from ..models.log_record import LogRecord
from ..models.session import SearchStatus

if TYPE_CHECKING:
    from ..models.session import SearchSession

NO_RESULTS_MESSAGE = "No logs found. Try adjusting your search criteria."
LOADING_MESSAGE = "Loading logs..."

# Badge markers for the terminal, by level style
LEVEL_MARKERS = {
    "debug": "·",
    "info": "ℹ",
    "warn": "⚠",
    "error": "✖",
    "fatal": "☠",
    "unknown": "?",
}


class LogListEntry(BaseModel):
    """One row of the result list."""

    entry_id: str
    level: str
    level_style: str
    timestamp: str
    message: str
    resource_id: str
    trace_id: str
    commit: str


class PaginationControls(BaseModel):
    current_page: int
    total_pages: int
    previous_disabled: bool
    next_disabled: bool
    page_indicator: str


class SearchView(BaseModel):
    """Everything the list view displays for the current session state."""

    status: SearchStatus
    entries: list[LogListEntry] = Field(default_factory=list)
    count_text: str
    message: str | None = Field(
        None,
        description="Empty-result, loading or error text shown instead of entries"
    )
    is_error: bool = False
    pagination: PaginationControls


def format_timestamp(timestamp: datetime | str | None) -> str:
    """Local, human-readable timestamp. Unparsed values are shown verbatim."""
    if timestamp is None:
        return ""
    if isinstance(timestamp, str):
        return timestamp
    return timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_log_detail(record: LogRecord) -> str:
    """Full record as indented JSON for inspection."""
    return json.dumps(record.to_detail_dict(), indent=2, ensure_ascii=False)


def build_entry(entry_id: str, record: LogRecord) -> LogListEntry:
    return LogListEntry(
        entry_id=entry_id,
        level=record.level,
        level_style=record.level_style,
        timestamp=format_timestamp(record.timestamp),
        message=record.message,
        resource_id=record.resource_id or "",
        trace_id=record.trace_id or "",
        commit=record.commit or "",
    )


def build_search_view(session: "SearchSession") -> SearchView:
    """
    Build the list view for the session's current state.

    The count shows the total matches of the last successful search and is
    zero after a failure. Both pagination controls are disabled while a
    request is loading.
    """
    entries = [build_entry(entry_id, record) for entry_id, record in session.entries.items()]
    loading = session.status == SearchStatus.LOADING

    message: str | None = None
    if session.status == SearchStatus.ERROR:
        message = session.error_message
    elif loading:
        message = LOADING_MESSAGE
    elif not entries:
        message = NO_RESULTS_MESSAGE

    total_pages = session.total_pages
    indicator = f"Page {session.current_page}"
    if total_pages > 1:
        indicator += f" of {total_pages}"

    pagination = PaginationControls(
        current_page=session.current_page,
        total_pages=total_pages,
        previous_disabled=loading or not session.has_previous,
        next_disabled=loading or not session.has_next,
        page_indicator=indicator,
    )

    return SearchView(
        status=session.status,
        entries=entries if session.status != SearchStatus.ERROR else [],
        count_text=f"({session.total_count})",
        message=message,
        is_error=session.status == SearchStatus.ERROR,
        pagination=pagination,
    )


def render_text(view: SearchView) -> str:
    """Render the list view as terminal text."""
    lines = [f"Logs {view.count_text}", ""]

    if view.message:
        marker = "✖ " if view.is_error else ""
        lines.append(f"{marker}{view.message}")
    else:
        for entry in view.entries:
            badge = LEVEL_MARKERS.get(entry.level_style, LEVEL_MARKERS["unknown"])
            lines.append(f"[{entry.entry_id}] {badge} {entry.level.upper() or '-'} {entry.timestamp}")
            lines.append(f"    {entry.message}")
            lines.append(
                f"    resource={entry.resource_id or '-'} trace={entry.trace_id or '-'} commit={entry.commit or '-'}"
            )

    controls = view.pagination
    previous = "   " if controls.previous_disabled else "< p"
    following = "   " if controls.next_disabled else "n >"
    lines.append("")
    lines.append(f"{previous}  {controls.page_indicator}  {following}")
    return "\n".join(lines)
