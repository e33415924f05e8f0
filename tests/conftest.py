"""
Test fixtures and configuration for logscope tests.

Unit tests use a lightweight AsyncMock search client that pages through an
in-memory dataset. Integration tests run the real aiohttp client against an
in-process log server.
"""

from typing import Any, AsyncGenerator, Dict, List
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from logscope.controller import FilterForm, SearchSessionController
from logscope.models.query import LogQuery
from logscope.models.response import LogSearchResult
from logscope.services.log_search_client import LogSearchClient, LogSearchConfig
from tests.factories import create_paged_dataset
from tests.log_server import STATE_KEY, LogServerState, create_log_server_app


def make_paged_search(dataset: List[Dict[str, Any]]):
    """Async search function serving ``dataset`` page by page, like the server."""

    async def search_logs(query: LogQuery) -> LogSearchResult:
        start = (query.page - 1) * query.limit
        page = dataset[start:start + query.limit]
        return LogSearchResult.from_payload({"logs": page, "count": len(dataset)})

    return search_logs


def make_mock_client(dataset: List[Dict[str, Any]] | None = None) -> AsyncMock:
    client = AsyncMock(spec=LogSearchClient)
    client.search_logs.side_effect = make_paged_search(dataset or [])
    return client


@pytest.fixture
def dataset_25() -> List[Dict[str, Any]]:
    """25 matching error records, enough for three pages."""
    return create_paged_dataset(25, level="ERROR")


@pytest.fixture
def mock_search_client(dataset_25) -> AsyncMock:
    """
    Lightweight mock for unit tests that need speed over realism.

    ``search_logs`` pages through ``dataset_25`` and every call is recorded.
    """
    return make_mock_client(dataset_25)


@pytest.fixture
def controller(mock_search_client) -> SearchSessionController:
    return SearchSessionController(mock_search_client, form=FilterForm())


@pytest.fixture
def server_state() -> LogServerState:
    return LogServerState()


@pytest_asyncio.fixture
async def log_server(server_state) -> AsyncGenerator[TestServer, None]:
    """In-process log server; its state is the ``server_state`` fixture."""
    app = create_log_server_app(server_state)
    server = TestServer(app)
    await server.start_server()
    assert app[STATE_KEY] is server_state
    yield server
    await server.close()


@pytest.fixture
def log_server_config(log_server) -> LogSearchConfig:
    return LogSearchConfig(
        base_url=f"http://{log_server.host}:{log_server.port}",
        request_timeout=2.0,
    )


@pytest_asyncio.fixture
async def log_search_client(log_server_config) -> AsyncGenerator[LogSearchClient, None]:
    """Connected client pointed at the in-process log server."""
    async with LogSearchClient(log_server_config) as client:
        yield client


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: Fast unit tests with minimal dependencies")
    config.addinivalue_line("markers", "integration: Tests against a local aiohttp log server")
    config.addinivalue_line("markers", "error_handling: Error scenario tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)

        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
