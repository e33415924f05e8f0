"""
HTTP client for the log search server.

This module provides an async aiohttp client with configuration handling,
a bounded request timeout, structured error conversion and proper session
cleanup.
"""

import json
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import aiohttp
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import SearchConnectionError, SearchServerError, SearchValidationError
from ..models.log_record import LogRecord
from ..models.query import LogQuery
from ..models.response import IngestResult, LogSearchResult
from ..utils.error_handling import ErrorMiddleware, create_error_context, error_handler
from ..utils.logging import get_logger

_ingest_middleware = ErrorMiddleware()


class LogSearchConfig(BaseSettings):
    """Configuration for the log search server connection."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    base_url: str = Field(default="http://localhost:3000", alias="LOGSCOPE_BASE_URL")
    logs_path: str = Field(default="/logs", alias="LOGSCOPE_LOGS_PATH")
    ingest_path: str = Field(default="/", alias="LOGSCOPE_INGEST_PATH")
    request_timeout: float = Field(default=10.0, gt=0, alias="LOGSCOPE_REQUEST_TIMEOUT")

    @field_validator("base_url", mode="before")
    @classmethod
    def normalize_base_url(cls, v: str) -> str:
        """Add http:// scheme if not present and drop trailing slashes."""
        url = (v or "").strip()
        if not url:
            raise ValueError("Base URL cannot be empty")
        if not url.startswith(("http://", "https://")):
            url = f"http://{url}"
        return url.rstrip("/")

    @field_validator("logs_path", "ingest_path", mode="before")
    @classmethod
    def normalize_path(cls, v: str) -> str:
        path = (v or "").strip()
        if not path.startswith("/"):
            path = f"/{path}"
        return path

    @property
    def logs_url(self) -> str:
        return f"{self.base_url}{self.logs_path}"

    @property
    def ingest_url(self) -> str:
        return f"{self.base_url}{self.ingest_path}"


class LogSearchClient:
    """
    Async client for ``GET /logs`` searches and log ingestion.

    Use as an async context manager, or call ``connect``/``close``.
    Every failure surfaces as a ``LogscopeError`` subclass.
    """

    def __init__(
        self,
        config: LogSearchConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Connection configuration. If None, loaded from environment.
            session: Existing aiohttp session to use. It is not closed by this client.
        """
        self.config = config or LogSearchConfig()
        self.logger = get_logger(__name__)
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
        self._error_middleware = ErrorMiddleware(log_level="ERROR")

    @property
    def is_connected(self) -> bool:
        return self._session is not None and not self._session.closed

    async def __aenter__(self) -> "LogSearchClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: Any) -> None:
        await self.close()

    async def connect(self) -> None:
        """Open the HTTP session if needed."""
        if self.is_connected:
            return
        self._session = aiohttp.ClientSession(timeout=self._timeout)
        self._owns_session = True
        self.logger.debug("Log search client connected", extra={"base_url": self.config.base_url})

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
            self.logger.debug("Log search client closed")
        self._session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if not self.is_connected:
            raise SearchConnectionError("Client not connected. Call connect() first.", url=self.config.base_url)
        assert self._session is not None
        return self._session

    async def search_logs(self, query: LogQuery) -> LogSearchResult:
        """
        Fetch one page of logs.

        Args:
            query: Built query with the exact parameters to send

        Returns:
            LogSearchResult with the page and the total match count

        Raises:
            SearchConnectionError: If the server cannot be reached
            SearchTimeoutError: If the request exceeds the configured timeout
            SearchServerError: If the server answers with a non-2xx status
            SearchResponseError: If the body is not a JSON object
        """
        url = self.config.logs_url
        context = create_error_context(
            "search_logs",
            url=url,
            params=query.as_dict(),
            timeout_seconds=self.config.request_timeout,
        )
        start_time = time.monotonic()

        try:
            session = self._require_session()
            async with session.get(url, params=list(query.params), timeout=self._timeout) as response:
                if not 200 <= response.status < 300:
                    body = await response.text(errors="replace")
                    raise SearchServerError(
                        f"HTTP error! Status: {response.status}",
                        status_code=response.status,
                        body=body,
                    )
                payload = await response.json(content_type=None)

            result = LogSearchResult.from_payload(payload)
        except Exception as e:
            structured_error = self._error_middleware.handle_error(e, "search_logs", context)
            if structured_error is e:
                raise
            raise structured_error from e

        self.logger.debug(
            "Search completed",
            extra={
                "count": result.count,
                "returned": len(result.logs),
                "skipped": result.skipped,
                "execution_time_ms": round((time.monotonic() - start_time) * 1000),
            }
        )
        return result

    @error_handler("ingest_log", middleware=_ingest_middleware)
    async def ingest_log(self, record: LogRecord | dict[str, Any]) -> IngestResult:
        """
        Send one log record to the ingestion endpoint.

        Records without a timestamp are stamped with the current UTC time.

        Args:
            record: LogRecord or raw mapping using the server's field names

        Returns:
            IngestResult with the server's status message
        """
        if isinstance(record, dict):
            # Validates the standard fields while keeping extra ones
            record = LogRecord.model_validate(record)
        elif not isinstance(record, LogRecord):
            raise SearchValidationError(
                f"Log record must be an object, got {type(record).__name__}",
                field="record",
            )

        if isinstance(record.timestamp, str):
            raise SearchValidationError(
                f"Invalid log record timestamp: {record.timestamp!r}",
                field="timestamp",
                value=record.timestamp,
            )

        payload = record.to_detail_dict()
        if not payload.get("timestamp"):
            payload["timestamp"] = datetime.now(UTC).isoformat().replace("+00:00", "Z")

        session = self._require_session()
        async with session.post(self.config.ingest_url, json=payload, timeout=self._timeout) as response:
            body = await response.text(errors="replace")
            if response.status != 200:
                raise SearchServerError(
                    f"HTTP error! Status: {response.status}",
                    status_code=response.status,
                    body=body,
                )

        data = json.loads(body) if body.strip() else {}

        status = data.get("status", "") if isinstance(data, dict) else ""
        self.logger.info("Log record ingested", extra={"status": status})
        return IngestResult(status=str(status))

    def __repr__(self) -> str:
        status = "connected" if self.is_connected else "disconnected"
        return f"LogSearchClient(base_url={self.config.base_url}, status={status}, timeout={self.config.request_timeout})"


@asynccontextmanager
async def create_log_search_client(
    config: LogSearchConfig | None = None,
) -> AsyncGenerator[LogSearchClient, None]:
    """
    Create a connected client as an async context manager.

    Args:
        config: Optional configuration. If None, loads from environment.

    Yields:
        Connected LogSearchClient instance
    """
    client = LogSearchClient(config)
    try:
        await client.connect()
        yield client
    finally:
        await client.close()
