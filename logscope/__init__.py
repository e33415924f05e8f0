"""
logscope - a search client for log servers exposing ``GET /logs``.

This package builds filter queries, runs paginated searches, keeps the
displayed results consistent with the latest request and renders them.
"""

__version__ = "0.1.0"

from .controller import FilterForm, SearchSessionController
from .models import FilterCriteria, LogQuery, LogRecord, build_log_query
from .models.session import SearchSession, SearchStatus
from .services import LogSearchClient, LogSearchConfig

__all__ = [
    "FilterCriteria",
    "FilterForm",
    "LogQuery",
    "LogRecord",
    "LogSearchClient",
    "LogSearchConfig",
    "SearchSession",
    "SearchSessionController",
    "SearchStatus",
    "build_log_query",
    "__version__",
]
