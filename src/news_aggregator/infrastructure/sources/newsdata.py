"""
NewsData.io Search API Integration

Live half of the news merge: results are fetched on every request and never
stored.

API Documentation: https://newsdata.io/documentation

Features:
- Free-text search, category and date filters
- Opaque continuation token (``nextPage``) passed back verbatim
- Payload-level error detection (HTTP 200 with ``status: "error"``)

Rate Limits:
- Free tier: 200 credits/day, page size capped at 10
- Paid tiers: page size up to 50
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from news_aggregator.domain.entities import map_category_to_upstream
from news_aggregator.infrastructure.sources.base_client import BaseAPIClient
from news_aggregator.shared.exceptions import (
    ConfigurationError,
    ErrorContext,
    UpstreamPayloadError,
    ValidationError,
)
from news_aggregator.shared.validation import parse_date_filter

logger = logging.getLogger(__name__)

NEWSDATA_API_BASE = "https://newsdata.io/api/1"

MAX_PAGE_SIZE = 50

NO_RESULTS_MESSAGE = "No articles found for your query"

PLACEHOLDER_API_KEYS = frozenset(
    {
        "your_newsdata_api_key_here",
        "your_api_key_here",
        "your-api-key",
        "changeme",
        "placeholder",
    }
)


def is_placeholder_api_key(api_key: str | None) -> bool:
    """True when the key is missing, blank or an obvious template value."""
    if api_key is None:
        return True
    key = api_key.strip()
    if not key:
        return True
    lowered = key.lower()
    return lowered in PLACEHOLDER_API_KEYS or lowered.startswith(("your_", "<"))


@dataclass
class SearchQuery:
    """Normalized query for the search API."""

    q: str | None = None
    category: str | None = None
    from_date: str | None = None
    to_date: str | None = None
    language: str = "en"
    source: str | None = None
    sort: str | None = None
    size: int = 10
    next_page: str | None = None

    @property
    def page_size(self) -> int:
        return max(1, min(int(self.size), MAX_PAGE_SIZE))

    def validate(self) -> None:
        """
        Reject malformed date filters before any network call.

        Raises:
            InvalidDateError: A date is not ``YYYY-MM-DD``
            ValidationError: ``from_date`` is after ``to_date``
        """
        start = parse_date_filter(self.from_date, "from")
        end = parse_date_filter(self.to_date, "to")
        if start and end and start > end:
            raise ValidationError(
                f"Invalid date range: 'from' ({self.from_date}) is after 'to' ({self.to_date})",
                context=ErrorContext(input_value={"from": self.from_date, "to": self.to_date}),
            )


@dataclass
class SearchResult:
    """One upstream batch of source-native records."""

    records: list[dict[str, Any]] = field(default_factory=list)
    total_results: int = 0
    next_page: str | None = None
    message: str | None = None


class NewsDataClient(BaseAPIClient):
    """
    NewsData.io client.

    Usage:
        client = NewsDataClient(api_key="pub_...")
        result = await client.search(SearchQuery(q="ransomware", category="Cybersecurity"))

        # Next batch: hand the token back unmodified
        more = await client.search(SearchQuery(q="ransomware", next_page=result.next_page))

    Note:
        The ``source`` hint and ``sort`` preference are applied by the caller
        after retrieval; the upstream has no equivalent filter on the free tier.
    """

    _service_name = "NewsData.io"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = NEWSDATA_API_BASE,
        timeout: float = 10.0,
        max_retries: int = 0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
            headers={"Accept": "application/json"},
            client=client,
        )

    def _require_api_key(self) -> str:
        if is_placeholder_api_key(self._api_key):
            logger.error("NewsData.io API key validation failed")
            raise ConfigurationError(
                "NewsData.io API key is not configured. Set NEWSDATA_API_KEY in the environment",
                context=ErrorContext(source=self._service_name, suggestion="Set NEWSDATA_API_KEY"),
            )
        return self._api_key.strip()  # type: ignore[union-attr]

    def build_params(self, query: SearchQuery, api_key: str) -> dict[str, str]:
        """Build request parameters. Dates must already be validated."""
        params: dict[str, str] = {"apikey": api_key}
        if query.language:
            params["language"] = query.language
        category = map_category_to_upstream(query.category)
        if category:
            params["category"] = category
        if query.q and query.q.strip():
            params["q"] = query.q.strip()
        if query.from_date and query.from_date.strip():
            params["from_date"] = query.from_date.strip()
        if query.to_date and query.to_date.strip():
            params["to_date"] = query.to_date.strip()
        if query.next_page:
            params["page"] = query.next_page
        params["size"] = str(query.page_size)
        return params

    def _check_payload(self, payload: dict[str, Any]) -> None:
        """HTTP 200 can still carry ``status: "error"`` or a non-200 ``code``."""
        status = payload.get("status")
        if status and status != "success":
            logger.error(f"NewsData.io API returned error status: {status}")
            raise UpstreamPayloadError(
                self._payload_message(payload) or "Failed to fetch news from NewsData.io",
                context=ErrorContext(source=self._service_name, metadata={"status": status}),
            )
        code = payload.get("code")
        if code is not None and str(code) != "200":
            logger.error(f"NewsData.io API error code: {code}")
            raise UpstreamPayloadError(
                self._payload_message(payload) or f"API returned error code: {code}",
                context=ErrorContext(source=self._service_name, metadata={"code": code}),
            )

    @staticmethod
    def _payload_message(payload: dict[str, Any]) -> str | None:
        results = payload.get("results")
        if isinstance(results, dict) and results.get("message"):
            return str(results["message"])
        message = payload.get("message")
        return str(message) if message else None

    async def search(self, query: SearchQuery) -> SearchResult:
        """
        Fetch one batch of articles.

        Raises:
            ConfigurationError: API key missing or placeholder (no network call)
            ValidationError: Malformed dates (no network call)
            AuthError / RateLimitError / ServerError / NetworkError / UpstreamPayloadError
        """
        api_key = self._require_api_key()
        query.validate()
        params = self.build_params(query, api_key)

        logger.info(
            f"Fetching news from NewsData.io (q={query.q!r}, category={params.get('category')}, "
            f"page={'set' if query.next_page else 'first'})"
        )
        payload = await self._make_request("/latest", params=params, operation="search")

        records = payload.get("results") or []
        if not isinstance(records, list):
            raise UpstreamPayloadError(
                "NewsData.io returned results in an unexpected format",
                context=ErrorContext(source=self._service_name, operation="search"),
            )
        logger.info(f"NewsData.io articles received: {len(records)}")

        if not records:
            return SearchResult(message=NO_RESULTS_MESSAGE)

        next_page = payload.get("nextPage")
        return SearchResult(
            records=[r for r in records if isinstance(r, dict)],
            total_results=int(payload.get("totalResults") or len(records)),
            next_page=str(next_page) if next_page else None,
        )
