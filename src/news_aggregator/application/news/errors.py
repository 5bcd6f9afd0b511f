"""
Error Classifier

Maps adapter-layer failures onto the closed taxonomy and one fixed,
user-facing message per class. The message travels in an HTTP 200
empty-results payload, never as a hard error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from news_aggregator.shared.exceptions import ErrorKind, ErrorSeverity, NewsAggregatorError

logger = logging.getLogger(__name__)

ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.CONFIGURATION: (
        "News search API key not configured. Add NEWSDATA_API_KEY to the environment to enable live news."
    ),
    ErrorKind.AUTH: "Invalid news search API key (401 Unauthorized). Please verify your credentials.",
    ErrorKind.RATE_LIMIT: "News search API rate limit exceeded. Please try again later.",
    ErrorKind.SERVER: "The news search service is temporarily unavailable. Please try again later.",
    ErrorKind.NETWORK: "Unable to connect to the news search service. Please check your internet connection.",
    ErrorKind.VALIDATION: "Invalid filter parameters. Dates must use YYYY-MM-DD and 'from' must not be after 'to'.",
    ErrorKind.UPSTREAM_PAYLOAD: "The news search service returned an error response. Please try again later.",
}


@dataclass(frozen=True)
class ClassifiedError:
    """Taxonomy tag plus the message shown to the client."""

    kind: ErrorKind
    message: str
    detail: str = ""


def classify_error(exc: BaseException) -> ClassifiedError:
    """
    Classify an exception.

    Anything outside the taxonomy is reported as a server error; the
    original is logged with its traceback.
    """
    kind = exc.kind if isinstance(exc, NewsAggregatorError) else None
    if kind is None:
        logger.error(f"Unclassified error: {type(exc).__name__}: {exc}", exc_info=exc)
        kind = ErrorKind.SERVER
    return ClassifiedError(kind=kind, message=ERROR_MESSAGES[kind], detail=str(exc))


def log_degraded(where: str, exc: NewsAggregatorError, classified: ClassifiedError) -> None:
    """Log a failure that was turned into a degraded response."""
    level = logging.ERROR if exc.severity is ErrorSeverity.CRITICAL else logging.WARNING
    logger.log(level, f"{where} degraded ({classified.kind.value}): {exc.to_dict()}")
