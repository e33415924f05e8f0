"""
Search session controller.

Connects the filter form, the query builder and the HTTP client to a
``SearchSession``. Searches and page navigation go through here; every
failure ends in the session's error state instead of propagating.
"""

from datetime import datetime
from typing import Any

from pydantic import ValidationError

from .exceptions import LogscopeError, SearchValidationError
from .models.log_record import LogRecord
from .models.query import FILTER_FIELDS, FilterCriteria, build_log_query
from .models.session import SearchSession, SearchStatus
from .presentation.search_view import SearchView, build_search_view
from .services.log_search_client import LogSearchClient
from .utils.error_handling import ErrorClassifier
from .utils.logging import (
    clear_correlation_id,
    get_logger,
    log_search_request,
    log_search_response,
    log_stale_response,
    set_correlation_id,
)

logger = get_logger(__name__)

_WIRE_TO_FIELD = {wire_name: name for name, wire_name in FILTER_FIELDS.items()}


class FilterForm:
    """
    Raw filter inputs, as typed by the user.

    Values are kept untouched; ``to_criteria`` normalizes them into a fresh
    ``FilterCriteria`` on every call.
    """

    def __init__(self, **values: Any) -> None:
        self._values: dict[str, Any] = {name: "" for name in FILTER_FIELDS}
        for name, value in values.items():
            self.set(name, value)

    @staticmethod
    def _field_name(name: str) -> str:
        if name in FILTER_FIELDS:
            return name
        if name in _WIRE_TO_FIELD:
            return _WIRE_TO_FIELD[name]
        raise SearchValidationError(f"Unknown filter field: {name}", field=name)

    def set(self, name: str, value: str | datetime | None) -> None:
        """Set an input by attribute name (``resource_id``) or wire name (``resourceId``)."""
        self._values[self._field_name(name)] = "" if value is None else value

    def get(self, name: str) -> Any:
        return self._values[self._field_name(name)]

    def clear(self) -> None:
        """Reset every input to empty."""
        for name in self._values:
            self._values[name] = ""

    def to_criteria(self) -> FilterCriteria:
        return FilterCriteria(**self._values)

    def __repr__(self) -> str:
        filled = {name: value for name, value in self._values.items() if value != ""}
        return f"FilterForm({filled})"


def format_error_message(error: LogscopeError) -> str:
    return f"Error fetching logs: {error.message}"


class SearchSessionController:
    """
    Owns a SearchSession and runs searches against the log server.

    Each request gets a token from a monotonically increasing counter; a
    response is applied only if its token is still the latest one issued,
    so a slow, superseded request can never overwrite newer state.
    """

    def __init__(
        self,
        client: LogSearchClient,
        form: FilterForm | None = None,
        session: SearchSession | None = None,
    ) -> None:
        self.client = client
        self.form = form if form is not None else FilterForm()
        self.session = session if session is not None else SearchSession()
        self._latest_token = 0

    @property
    def latest_token(self) -> int:
        return self._latest_token

    async def trigger_search(self, criteria: FilterCriteria | None = None) -> SearchSession:
        """
        Start a new search from page 1.

        Args:
            criteria: Criteria to use; read fresh from the form when omitted

        Returns:
            The session, after the request has been applied or discarded
        """
        if criteria is None:
            try:
                criteria = self.form.to_criteria()
            except ValidationError as e:
                # Invalid input still needs a token so it supersedes in-flight requests
                self._latest_token += 1
                first = e.errors(include_url=False)[0]
                field = ".".join(str(part) for part in first["loc"])
                error = SearchValidationError(
                    f"Invalid filter input for {field}: {first['msg']}",
                    original_error=e,
                    field=field,
                )
                self.session.begin_search(FilterCriteria())
                self._fail(error, self._latest_token)
                return self.session

        self.session.begin_search(criteria)
        await self._execute(criteria, 1)
        return self.session

    async def next_page(self) -> bool:
        """Load the next page. Returns False (and sends nothing) at the last page."""
        return await self.go_to_page(self.session.current_page + 1)

    async def previous_page(self) -> bool:
        """Load the previous page. Returns False (and sends nothing) at page 1."""
        return await self.go_to_page(self.session.current_page - 1)

    async def go_to_page(self, page: int) -> bool:
        """
        Load ``page`` with the criteria of the last search.

        Navigation is only possible once a search has completed and the page
        lies within ``[1, total_pages]``; otherwise nothing happens.
        """
        if self.session.status not in (SearchStatus.READY, SearchStatus.ERROR):
            return False
        if not self.session.can_navigate_to(page):
            logger.debug(
                "Ignoring navigation outside page bounds",
                extra={"page": page, "total_pages": self.session.total_pages},
            )
            return False

        self.session.current_page = page
        await self._execute(self.session.active_criteria, page)
        return True

    def clear_filters(self) -> None:
        """Empty every form input. The next search trigger uses no constraints."""
        self.form.clear()

    def get_record(self, entry_id: str) -> LogRecord | None:
        return self.session.get_record(entry_id)

    def view(self) -> SearchView:
        return build_search_view(self.session)

    async def _execute(self, criteria: FilterCriteria, page: int) -> None:
        self._latest_token += 1
        token = self._latest_token
        self.session.status = SearchStatus.LOADING
        set_correlation_id(f"search-{token}")

        try:
            query = build_log_query(criteria, page, self.session.page_size)
            log_search_request(query.as_dict(), token)
            result = await self.client.search_logs(query)
        except Exception as e:
            error = ErrorClassifier.classify_search_error(e, {"operation": "search_logs"})
            if self._is_current(token):
                self._fail(error, token)
        else:
            if self._is_current(token):
                self.session.apply_result(result, token)
                log_search_response(token, True, count=result.count)
        finally:
            clear_correlation_id()

    def _is_current(self, token: int) -> bool:
        if token != self._latest_token:
            log_stale_response(token, self._latest_token)
            return False
        return True

    def _fail(self, error: LogscopeError, token: int) -> None:
        self.session.apply_failure(format_error_message(error), token)
        log_search_response(token, False, error=error.message)
