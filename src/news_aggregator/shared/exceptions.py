"""
Unified Exception Hierarchy for the News Aggregator.

Every upstream failure is carried through the call chain as a typed
exception with a fixed ``kind`` tag, so callers never inspect message text.

Exception Hierarchy:
    NewsAggregatorError (base)
    ├── ConfigurationError          kind=configuration
    ├── ValidationError             kind=validation
    ├── UpstreamError
    │   ├── AuthError               kind=auth
    │   ├── RateLimitError          kind=rate_limit
    │   ├── ServerError             kind=server
    │   ├── NetworkError            kind=network
    │   └── UpstreamPayloadError    kind=upstream_payload
    ├── FeedFetchError              (whole-feed failure, stays internal)
    ├── NotFoundError               (HTTP 404)
    └── UnsupportedOperationError   (HTTP 405)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    WARNING = auto()  # Recoverable, can continue
    ERROR = auto()  # Failed but can retry
    CRITICAL = auto()  # Cannot continue
    TRANSIENT = auto()  # Temporary, retry later


class ErrorCategory(Enum):
    """Categories for error classification."""

    API = "api"
    VALIDATION = "validation"
    DATA = "data"
    CONFIGURATION = "config"
    NETWORK = "network"


class ErrorKind(str, Enum):
    """Closed taxonomy of failures surfaced to API consumers."""

    CONFIGURATION = "configuration"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    NETWORK = "network"
    VALIDATION = "validation"
    UPSTREAM_PAYLOAD = "upstream_payload"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context for error messages."""

    source: str | None = None
    operation: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    status_code: int | None = None
    retry_after: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class NewsAggregatorError(Exception):
    """
    Base exception for all News Aggregator errors.

    Provides:
    - Structured error context
    - Severity classification
    - Retry guidance
    - A taxonomy ``kind`` for the classes that reach API consumers
    """

    __slots__ = ("context", "severity", "category", "retryable")

    kind: ErrorKind | None = None

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.API,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
            "retryable": self.retryable,
        }
        if self.kind is not None:
            result["kind"] = self.kind.value
        if self.context.source:
            result["source"] = self.context.source
        if self.context.status_code is not None:
            result["status_code"] = self.context.status_code
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        if self.context.retry_after:
            result["retry_after_seconds"] = self.context.retry_after
        return result


# =============================================================================
# Configuration / Validation
# =============================================================================


class ConfigurationError(NewsAggregatorError):
    """Raised when the search API key is missing or still a placeholder."""

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str = "News search API key is not configured",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
        )


class ValidationError(NewsAggregatorError):
    """Raised for malformed request filters, before any network call."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )


class InvalidDateError(ValidationError):
    """Raised when a date filter is not ``YYYY-MM-DD``."""

    def __init__(
        self,
        param_name: str,
        value: Any,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = ErrorContext(
            source=ctx.source,
            operation=ctx.operation,
            input_value=value,
            suggestion="Dates must use the YYYY-MM-DD format",
            metadata=ctx.metadata,
        )
        super().__init__(f"Invalid date for '{param_name}': {value!r} (expected YYYY-MM-DD)", context=ctx)


# =============================================================================
# Upstream Errors
# =============================================================================


class UpstreamError(NewsAggregatorError):
    """Base class for failures talking to the news search API."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.API,
            retryable=retryable,
        )


class AuthError(UpstreamError):
    """Raised when the upstream rejects the credentials (HTTP 401)."""

    kind = ErrorKind.AUTH

    def __init__(
        self,
        message: str = "Upstream rejected the API key (401 Unauthorized)",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context, retryable=False)


class RateLimitError(UpstreamError):
    """Raised when the upstream rate limit is exceeded (HTTP 429)."""

    kind = ErrorKind.RATE_LIMIT

    def __init__(
        self,
        message: str = "API rate limit exceeded",
        *,
        retry_after: float = 1.0,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = ErrorContext(
            source=ctx.source,
            operation=ctx.operation,
            input_value=ctx.input_value,
            suggestion=ctx.suggestion or "Wait and retry the request",
            status_code=ctx.status_code,
            retry_after=retry_after,
            metadata=ctx.metadata,
        )
        super().__init__(message, context=ctx, retryable=True)
        self.severity = ErrorSeverity.TRANSIENT


class ServerError(UpstreamError):
    """Raised when the upstream answers with HTTP 5xx."""

    kind = ErrorKind.SERVER

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        *,
        service: str = "NewsData.io",
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(f"{service}: {message}", context=context, retryable=True)
        self.severity = ErrorSeverity.TRANSIENT


class NetworkError(UpstreamError):
    """Raised when no response was received (timeout, DNS, refused connection)."""

    kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str = "Network connection failed",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context, retryable=True)
        self.category = ErrorCategory.NETWORK


class UpstreamPayloadError(UpstreamError):
    """Raised when the upstream body signals failure or cannot be decoded."""

    kind = ErrorKind.UPSTREAM_PAYLOAD

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context, retryable=False)
        self.category = ErrorCategory.DATA


# =============================================================================
# Internal / HTTP-mapped Errors
# =============================================================================


class FeedFetchError(NewsAggregatorError):
    """Raised when a whole RSS/Atom feed cannot be fetched or parsed."""

    def __init__(
        self,
        feed_url: str,
        reason: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            f"Failed to fetch feed {feed_url}: {reason}",
            context=context or ErrorContext(source=feed_url),
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.DATA,
            retryable=True,
        )
        self.feed_url = feed_url


class NotFoundError(NewsAggregatorError):
    """Raised when a requested article does not exist."""

    def __init__(
        self,
        resource: str = "Article",
        identifier: str | None = None,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            f"{resource} not found",
            context=context or ErrorContext(input_value=identifier),
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.DATA,
            retryable=False,
        )
        self.identifier = identifier


class UnsupportedOperationError(NewsAggregatorError):
    """Raised for write operations on the read-only news resource."""

    def __init__(self, message: str) -> None:
        super().__init__(
            message,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )


def is_retryable_error(error: Exception) -> bool:
    """Check if an error is worth retrying on a later cycle."""
    if isinstance(error, NewsAggregatorError):
        return error.retryable
    return False
