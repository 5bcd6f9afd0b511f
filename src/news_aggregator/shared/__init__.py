"""
Shared kernel for the News Aggregator.

Provides:
- Unified exception hierarchy and error taxonomy
- Async helpers for concurrent fetching
- Environment-driven settings
"""

from .async_utils import gather_with_errors
from .exceptions import (
    AuthError,
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ErrorKind,
    ErrorSeverity,
    FeedFetchError,
    InvalidDateError,
    NetworkError,
    NewsAggregatorError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnsupportedOperationError,
    UpstreamError,
    UpstreamPayloadError,
    ValidationError,
    is_retryable_error,
)
from .settings import Settings

__all__ = [
    # Exceptions
    "NewsAggregatorError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorKind",
    "ConfigurationError",
    "ValidationError",
    "InvalidDateError",
    "UpstreamError",
    "AuthError",
    "RateLimitError",
    "ServerError",
    "NetworkError",
    "UpstreamPayloadError",
    "FeedFetchError",
    "NotFoundError",
    "UnsupportedOperationError",
    "is_retryable_error",
    # Async utilities
    "gather_with_errors",
    # Settings
    "Settings",
]
