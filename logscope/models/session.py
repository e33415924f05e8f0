"""
Search session state.

``SearchSession`` is the single piece of mutable state behind the search
view: active criteria, page cursor, the last successful page and the
error shown when the last request failed. It is created once per view
and changed only by ``SearchSessionController``.
"""

import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .log_record import LogRecord
from .query import PAGE_SIZE, FilterCriteria
from .response import LogSearchResult


class SearchStatus(str, Enum):
    """Lifecycle state of the session's latest request."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class SearchSession(BaseModel):
    """
    Pagination and result state for one search view.
    """

    model_config = ConfigDict(validate_assignment=True)

    page_size: int = Field(
        PAGE_SIZE,
        ge=1,
        frozen=True,
        description="Fixed number of records per page"
    )

    current_page: int = Field(
        1,
        ge=1,
        description="1-based page cursor"
    )

    total_count: int = Field(
        0,
        ge=0,
        description="Total matches reported by the last successful response"
    )

    active_criteria: FilterCriteria = Field(
        default_factory=FilterCriteria,
        description="Criteria of the last search trigger, reused by page navigation"
    )

    status: SearchStatus = SearchStatus.IDLE

    error_message: str | None = None

    applied_token: int = Field(
        0,
        ge=0,
        description="Token of the request whose outcome is currently shown"
    )

    entries: dict[str, LogRecord] = Field(
        default_factory=dict,
        description="Entry identifier -> record, in display order"
    )

    @computed_field
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def max_page(self) -> int:
        """Highest valid page; an empty result still has one page."""
        return max(self.total_pages, 1)

    @property
    def current_logs(self) -> list[LogRecord]:
        return list(self.entries.values())

    @property
    def entry_ids(self) -> list[str]:
        return list(self.entries.keys())

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    def can_navigate_to(self, page: int) -> bool:
        """Whether ``page`` lies within ``[1, total_pages]``."""
        return 1 <= page <= self.total_pages

    def get_record(self, entry_id: str) -> LogRecord | None:
        """Look up an already-fetched record by its list entry identifier."""
        return self.entries.get(entry_id)

    def begin_search(self, criteria: FilterCriteria) -> None:
        """Start a new search: store the criteria and rewind to page 1."""
        self.active_criteria = criteria
        self.current_page = 1

    def apply_result(self, result: LogSearchResult, token: int) -> None:
        """Show a successful response."""
        self.entries = {f"{token}-{index}": record for index, record in enumerate(result.logs)}
        self.total_count = result.count
        self.current_page = min(self.current_page, self.max_page)
        self.applied_token = token
        self.status = SearchStatus.READY
        self.error_message = None

    def apply_failure(self, message: str, token: int) -> None:
        """Show a failed request: no records, zero count and the error."""
        self.entries = {}
        self.total_count = 0
        self.current_page = 1
        self.applied_token = token
        self.status = SearchStatus.ERROR
        self.error_message = message
