"""
Custom exceptions for the logscope search client.

Every failure of a search request is turned into one of these structured
errors, carrying severity, category, context and a recovery hint so the
controller can report it and the logs can record it.
"""

from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """Error severity levels for classification and logging."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories matching the failure paths of a search request."""

    CONNECTION = "connection"
    TIMEOUT = "timeout"
    SERVER = "server"
    RESPONSE = "response"
    VALIDATION = "validation"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class LogscopeError(Exception):
    """
    Base exception for all logscope errors.

    Provides structured error information with severity, category,
    context, and recovery hints.
    """

    def __init__(
        self,
        message: str,
        *,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        context: dict[str, Any] | None = None,
        recoverable: bool = False,
        recovery_hint: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.category = category
        self.context = context or {}
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint
        self.original_error = original_error

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "recoverable": self.recoverable,
            "recovery_hint": self.recovery_hint,
            "context": self.context,
            "original_error": str(self.original_error) if self.original_error else None,
        }


class SearchConnectionError(LogscopeError):
    """Raised when the log search server cannot be reached."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        url: str | None = None,
        **kwargs: Any
    ) -> None:
        context = kwargs.pop('context', {})
        if url:
            context["url"] = url

        super().__init__(
            message,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.CONNECTION,
            recoverable=True,
            recovery_hint="Check that the log server is running and search again",
            original_error=original_error,
            context=context,
            **kwargs
        )


class SearchTimeoutError(LogscopeError):
    """Raised when a search request exceeds its time budget."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        operation: str | None = None,
        timeout_seconds: float | None = None,
        **kwargs: Any
    ) -> None:
        context = {
            "operation": operation,
            "timeout_seconds": timeout_seconds,
        }
        context = {k: v for k, v in context.items() if v is not None}

        super().__init__(
            message,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.TIMEOUT,
            recoverable=True,
            recovery_hint="Narrow the filters or increase the request timeout",
            original_error=original_error,
            context=context,
            **kwargs
        )


class SearchServerError(LogscopeError):
    """Raised when the server answers with a non-success HTTP status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        original_error: Exception | None = None,
        body: str | None = None,
        **kwargs: Any
    ) -> None:
        context: dict[str, Any] = {"status_code": status_code}
        if body:
            context["body"] = body[:512]

        super().__init__(
            message,
            severity=ErrorSeverity.HIGH if status_code >= 500 else ErrorSeverity.MEDIUM,
            category=ErrorCategory.SERVER,
            recoverable=status_code >= 500,
            recovery_hint="Check the filter values" if status_code < 500 else "Search again later",
            original_error=original_error,
            context=context,
            **kwargs
        )
        self.status_code = status_code


class SearchResponseError(LogscopeError):
    """Raised when the response body is not a usable JSON object."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        content_type: str | None = None,
        **kwargs: Any
    ) -> None:
        context = {"content_type": content_type} if content_type else {}
        super().__init__(
            message,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.RESPONSE,
            recoverable=False,
            recovery_hint="Verify the server exposes the log search API",
            original_error=original_error,
            context=context,
            **kwargs
        )


class SearchValidationError(LogscopeError):
    """Raised when local input cannot be turned into a query."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        field: str | None = None,
        value: Any | None = None,
        **kwargs: Any
    ) -> None:
        context = {}
        if field:
            context["field"] = field
        if value is not None:
            context["invalid_value"] = str(value)

        super().__init__(
            message,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            recoverable=False,
            recovery_hint="Correct the input parameters",
            original_error=original_error,
            context=context,
            **kwargs
        )


class SearchSystemError(LogscopeError):
    """Raised for unexpected failures."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        component: str | None = None,
        **kwargs: Any
    ) -> None:
        context = {"component": component} if component else {}
        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.SYSTEM,
            recoverable=False,
            recovery_hint="Report the problem with the debug log attached",
            original_error=original_error,
            context=context,
            **kwargs
        )
