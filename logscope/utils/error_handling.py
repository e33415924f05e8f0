"""
Error handling framework for logscope.

Provides error classification, structured error logging and a decorator
that guarantees async client calls only ever raise ``LogscopeError``.
"""

import asyncio
import json
import traceback
from collections.abc import Callable
from datetime import UTC, datetime
from functools import wraps
from typing import Any

import aiohttp
from pydantic import ValidationError

from ..exceptions import (
    LogscopeError,
    SearchConnectionError,
    SearchResponseError,
    SearchServerError,
    SearchSystemError,
    SearchTimeoutError,
    SearchValidationError,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)


class ErrorClassifier:
    """
    Classifies transport, decoding and validation exceptions into
    structured logscope errors.
    """

    @staticmethod
    def classify_search_error(error: Exception, context: dict[str, Any] | None = None) -> LogscopeError:
        """
        Classify an exception raised while talking to the log server.

        Args:
            error: The original exception
            context: Additional context information

        Returns:
            Appropriate LogscopeError subclass
        """
        context = context or {}

        if isinstance(error, LogscopeError):
            return error

        # Timeouts first: ServerTimeoutError is also a connection error
        if isinstance(error, asyncio.TimeoutError):
            return SearchTimeoutError(
                "Request timed out",
                original_error=error,
                operation=context.get("operation"),
                timeout_seconds=context.get("timeout_seconds"),
            )

        # ContentTypeError is a ClientResponseError raised while decoding
        if isinstance(error, aiohttp.ContentTypeError):
            return SearchResponseError(
                f"Malformed response: {error.message}",
                original_error=error,
            )

        if isinstance(error, aiohttp.ClientResponseError):
            return SearchServerError(
                f"HTTP error! Status: {error.status}",
                status_code=error.status,
                original_error=error,
            )

        if isinstance(error, aiohttp.ClientError):
            return SearchConnectionError(
                f"Connection failed: {str(error) or type(error).__name__}",
                original_error=error,
                url=context.get("url"),
            )

        # Body decoding, checked before ValueError since JSONDecodeError is one
        if isinstance(error, json.JSONDecodeError | UnicodeDecodeError | ValidationError):
            return SearchResponseError(
                f"Malformed response: {str(error)}",
                original_error=error,
            )

        if isinstance(error, ValueError | TypeError):
            return SearchValidationError(
                f"Validation error: {str(error)}",
                original_error=error,
                field=context.get("field"),
                value=context.get("value"),
            )

        return SearchSystemError(
            f"Unexpected error: {str(error)}",
            original_error=error,
            component=context.get("component", "log_search_client"),
        )


class ErrorMiddleware:
    """
    Consistent error transformation and logging for client operations.
    """

    def __init__(
        self,
        include_traceback: bool = False,
        log_level: str = "ERROR",
    ):
        self.include_traceback = include_traceback
        self.log_level = log_level
        self.classifier = ErrorClassifier()
        self.error_stats: dict[str, int] = {}

    def handle_error(
        self,
        error: Exception,
        operation: str,
        context: dict[str, Any] | None = None,
    ) -> LogscopeError:
        """
        Transform an error and log it with its context.

        Args:
            error: The original exception
            operation: Name of the operation that failed
            context: Additional context information

        Returns:
            Structured logscope error
        """
        context = context or {}
        context["operation"] = operation
        context["timestamp"] = datetime.now(UTC).isoformat()

        if isinstance(error, LogscopeError):
            structured_error = error
            structured_error.context.update(context)
        else:
            structured_error = self.classifier.classify_search_error(error, context)

        error_key = f"{type(structured_error).__name__}:{operation}"
        self.error_stats[error_key] = self.error_stats.get(error_key, 0) + 1

        log_data = {
            "operation": operation,
            "error_info": structured_error.to_dict(),
            "error_count": self.error_stats[error_key],
        }

        if self.include_traceback and structured_error.original_error:
            log_data["traceback"] = traceback.format_exception(
                type(structured_error.original_error),
                structured_error.original_error,
                structured_error.original_error.__traceback__
            )

        log_method = getattr(logger, self.log_level.lower(), logger.error)
        log_method(
            f"Error in {operation}: {structured_error.message}",
            extra=log_data
        )

        return structured_error

    def get_error_stats(self) -> dict[str, int]:
        return self.error_stats.copy()

    def reset_error_stats(self) -> None:
        self.error_stats.clear()


def error_handler(
    operation: str,
    middleware: ErrorMiddleware | None = None,
    include_traceback: bool = False,
) -> Callable[..., Callable[..., Any]]:
    """
    Decorator converting any exception of an async function into a
    ``LogscopeError``.

    Args:
        operation: Name of the operation for logging
        middleware: Shared middleware instance (a fresh one per call if None)
        include_traceback: Whether to include traceback in logs
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                handler = middleware or ErrorMiddleware(include_traceback=include_traceback)
                context = {
                    "function": func.__name__,
                }
                structured_error = handler.handle_error(e, operation, context)
                if structured_error is e:
                    raise
                raise structured_error from e

        return wrapper
    return decorator


def create_error_context(
    operation: str,
    url: str | None = None,
    params: dict[str, str] | None = None,
    **additional_context: Any
) -> dict[str, Any]:
    """
    Create standardized error context for consistent logging.

    Args:
        operation: The operation being performed
        url: Request URL
        params: Query parameters being sent
        **additional_context: Additional context fields

    Returns:
        Standardized context dictionary
    """
    context: dict[str, Any] = {
        "operation": operation,
        "timestamp": datetime.now(UTC).isoformat(),
    }

    if url:
        context["url"] = url
    if params:
        context["params"] = dict(params)

    context.update(additional_context)
    return context
