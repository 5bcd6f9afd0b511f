"""
Base API Client - Common HTTP request pattern with rate limiting and typed errors.

Provides a reusable base class for upstream JSON APIs:
- One httpx.AsyncClient per client object (constructed once per process)
- Minimum interval between requests
- Optional retry of retryable failures with exponential backoff
- Every failure mapped onto the error taxonomy; raw httpx exceptions never
  escape
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from typing_extensions import Self

from news_aggregator.shared.exceptions import (
    AuthError,
    ErrorContext,
    NetworkError,
    RateLimitError,
    ServerError,
    UpstreamError,
    UpstreamPayloadError,
    is_retryable_error,
)

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """
    Base class for external API clients.

    Provides common infrastructure:
    - httpx.AsyncClient management
    - Rate limiting with configurable interval
    - Retry of retryable failures (disabled by default: request paths must
      not stall behind a degraded upstream)
    - Consistent error classification

    Subclasses should set ``_service_name`` and can override:
    - ``_check_payload()``: Inspect a decoded HTTP 200 body for embedded errors

    Example:
        class MyClient(BaseAPIClient):
            _service_name = "MyAPI"

            def __init__(self):
                super().__init__(base_url="https://api.example.com", timeout=10.0)

            async def get_item(self, item_id: str) -> dict:
                return await self._make_request(f"/items/{item_id}")
    """

    _service_name: str = "API"

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 10.0,
        min_interval: float = 0.0,
        max_retries: int = 0,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize base client.

        Args:
            base_url: Base URL for the API (optional, can pass full URLs)
            timeout: Request timeout in seconds
            min_interval: Minimum seconds between requests (rate limiting)
            max_retries: Extra attempts for retryable failures
            headers: Default headers for all requests
            client: Pre-built httpx client (tests inject a MockTransport here)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._min_interval = min_interval
        self._max_retries = max_retries
        self._last_request_time = 0.0
        self._client = client or httpx.AsyncClient(
            timeout=self._timeout,
            headers=headers or {},
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )

    async def _rate_limit(self) -> None:
        """Enforce minimum interval between requests."""
        if self._min_interval <= 0:
            return
        elapsed = time.time() - self._last_request_time
        if elapsed < self._min_interval:
            await asyncio.sleep(self._min_interval - elapsed)
        self._last_request_time = time.time()

    def _build_url(self, url: str) -> str:
        """Build full URL from path or full URL."""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}{url}"

    async def _make_request(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        operation: str | None = None,
    ) -> dict[str, Any]:
        """
        GET a JSON document, retrying retryable failures if configured.

        Raises:
            AuthError: HTTP 401
            RateLimitError: HTTP 429
            ServerError: HTTP 5xx
            NetworkError: No response (timeout, DNS, connection refused)
            UpstreamPayloadError: Other HTTP errors, undecodable or failing payloads
        """
        full_url = self._build_url(url)

        for attempt in range(self._max_retries + 1):
            await self._rate_limit()
            try:
                return await self._request_once(full_url, params=params, operation=operation)
            except UpstreamError as e:
                if attempt < self._max_retries and is_retryable_error(e):
                    delay = e.context.retry_after or float(2**attempt)
                    logger.warning(
                        f"{self._service_name}: {e} (attempt {attempt + 1}/{self._max_retries + 1}), "
                        f"retrying in {delay:.1f}s"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise

        raise RuntimeError("Unexpected retry loop exit")

    async def _request_once(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        operation: str | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            logger.warning(f"{self._service_name} request timed out after {self._timeout}s")
            raise NetworkError(
                f"{self._service_name} request timed out after {self._timeout}s",
                context=ErrorContext(source=self._service_name, operation=operation),
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"{self._service_name} request failed: {e}")
            raise NetworkError(
                f"Unable to connect to {self._service_name}: {e}",
                context=ErrorContext(source=self._service_name, operation=operation),
            ) from e

        self._raise_for_status(response, operation)

        try:
            payload = response.json()
        except ValueError as e:
            logger.exception(f"{self._service_name} returned a non-JSON body")
            raise UpstreamPayloadError(
                f"{self._service_name} returned an invalid JSON response",
                context=ErrorContext(source=self._service_name, operation=operation, status_code=response.status_code),
            ) from e

        if not isinstance(payload, dict):
            raise UpstreamPayloadError(
                f"{self._service_name} returned an unexpected payload",
                context=ErrorContext(source=self._service_name, operation=operation, status_code=response.status_code),
            )

        self._check_payload(payload)
        return payload

    def _raise_for_status(self, response: httpx.Response, operation: str | None) -> None:
        """Map non-2xx responses onto the error taxonomy."""
        status = response.status_code
        if status < 400:
            return

        ctx = ErrorContext(source=self._service_name, operation=operation, status_code=status)
        detail = self._error_detail(response)
        logger.error(f"{self._service_name} HTTP error {status}: {detail or response.reason_phrase}")

        if status == 401:
            raise AuthError(f"{self._service_name} rejected the API key (401 Unauthorized)", context=ctx)
        if status == 429:
            raise RateLimitError(
                f"{self._service_name} rate limit exceeded",
                retry_after=self._get_retry_after(response),
                context=ctx,
            )
        if status >= 500:
            raise ServerError(f"HTTP {status}: {response.reason_phrase}", service=self._service_name, context=ctx)
        raise UpstreamPayloadError(
            f"{self._service_name} error ({status}): {detail or response.reason_phrase or 'Unknown error'}",
            context=ctx,
        )

    def _check_payload(self, payload: dict[str, Any]) -> None:
        """Inspect a decoded HTTP 200 body. Override for service-specific status fields."""

    @staticmethod
    def _error_detail(response: httpx.Response) -> str | None:
        """Best-effort error message from a JSON error body."""
        try:
            body = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict):
            return None
        results = body.get("results")
        if isinstance(results, dict) and results.get("message"):
            return str(results["message"])
        message = body.get("message")
        return str(message) if message else None

    @staticmethod
    def _get_retry_after(response: httpx.Response) -> float:
        """Extract Retry-After from response headers, defaulting to 1 second."""
        try:
            return float(response.headers.get("Retry-After", 1.0))
        except (ValueError, TypeError):
            return 1.0

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
