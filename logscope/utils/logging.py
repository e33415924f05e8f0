"""
Structured logging configuration for logscope.

This module provides structured JSON logging with configurable levels
and correlation ID support, so every log line emitted while a search
request is in flight carries that request's token.
"""

import json
import logging
import os
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any, cast
from uuid import uuid4

import structlog

_correlation_id: ContextVar[str | None] = ContextVar("logscope_correlation_id", default=None)

_STANDARD_RECORD_KEYS = frozenset({
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "getMessage",
    "message",
})


class CorrelationIDProcessor:
    """Processor to add correlation IDs to structlog events."""

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        correlation_id = _correlation_id.get()
        if correlation_id:
            event_dict["correlation_id"] = correlation_id
        return event_dict

    def get_correlation_id(self) -> str | None:
        return _correlation_id.get()

    def set_correlation_id(self, correlation_id: str | None = None) -> str:
        """Set correlation ID for the current task context."""
        if correlation_id is None:
            correlation_id = str(uuid4())
        _correlation_id.set(correlation_id)
        return correlation_id

    def clear_correlation_id(self) -> None:
        _correlation_id.set(None)


correlation_processor = CorrelationIDProcessor()


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=UTC
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        correlation_id = correlation_processor.get_correlation_id()
        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Extra fields passed through ``extra=``
        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_KEYS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def configure_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    enable_console: bool = True,
    enable_file: bool = False,
    enable_json_logging: bool = True,
    verbose: bool = False,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (defaults to /tmp/logscope.log)
        enable_console: Enable console logging (stderr)
        enable_file: Enable file logging
        enable_json_logging: Enable JSON structured logging
        verbose: Enable verbose/debug logging
    """
    if log_level is None:
        if verbose:
            log_level = "DEBUG"
        else:
            log_level = os.getenv("LOG_LEVEL", "WARNING")
    log_level = log_level.upper()

    numeric_level = getattr(logging, log_level, logging.INFO)

    if log_file is None:
        log_file = "/tmp/logscope.log"

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(numeric_level)

    if enable_json_logging:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handlers: list[logging.Handler] = []

    if enable_console:
        handlers.append(logging.StreamHandler())

    if enable_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        root_logger.addHandler(handler)

    if enable_json_logging:
        processors: list[Any] = [
            correlation_processor,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ]
        structlog.configure(
            processors=cast(Any, processors),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Set correlation ID for the current task context.

    Args:
        correlation_id: Correlation ID to set (generates UUID4 if None)

    Returns:
        The correlation ID that was set
    """
    return correlation_processor.set_correlation_id(correlation_id)


def clear_correlation_id() -> None:
    correlation_processor.clear_correlation_id()


def log_search_request(params: dict[str, str], token: int) -> None:
    """
    Log an outgoing search request.

    Args:
        params: Query parameters sent to the server
        token: Request token assigned by the controller
    """
    logger = get_logger("logscope.search")
    logger.info(
        "Search request",
        extra={
            "params": params,
            "request_token": token,
            "event_type": "search_request",
        },
    )


def log_search_response(
    token: int, success: bool, count: int | None = None, error: str | None = None
) -> None:
    """
    Log the outcome of a search request.

    Args:
        token: Request token assigned by the controller
        success: Whether the request was successful
        count: Total match count (if successful)
        error: Error message (if failed)
    """
    logger = get_logger("logscope.search")
    extra: dict[str, Any] = {
        "request_token": token,
        "success": success,
        "event_type": "search_response",
    }

    if count is not None:
        extra["count"] = count
    if error:
        extra["error"] = error

    if success:
        logger.info("Search response", extra=extra)
    else:
        logger.error("Search failed", extra=extra)


def log_stale_response(token: int, latest_token: int) -> None:
    """Log a response that was discarded because a newer request superseded it."""
    logger = get_logger("logscope.search")
    logger.debug(
        "Discarding superseded search response",
        extra={
            "request_token": token,
            "latest_token": latest_token,
            "event_type": "search_stale",
        },
    )
