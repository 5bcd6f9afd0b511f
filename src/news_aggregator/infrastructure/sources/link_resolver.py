"""
Network dereferencing of aggregator redirect links.

Secondary path only: feed content is searched for an embedded article URL
first. Resolution is best-effort and never fails the caller.
"""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_TIMEOUT = 5.0


class LinkResolver:
    """
    Follow HTTP redirects to find the final article URL.

    Usage:
        resolver = LinkResolver(timeout=5.0)
        final_url = await resolver.resolve("https://news.google.com/rss/articles/CBMi...")
    """

    def __init__(
        self,
        timeout: float = DEFAULT_REDIRECT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": "Mozilla/5.0 (compatible; NewsAggregator/1.0)"},
        )

    async def resolve(self, url: str) -> str:
        """Return the URL after redirects, or ``url`` unchanged on any failure."""
        if not url:
            return url
        try:
            response = await self._client.head(url, follow_redirects=True, timeout=self._timeout)
            if response.status_code == 405:
                response = await self._client.get(url, follow_redirects=True, timeout=self._timeout)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to resolve redirect for {url}: {e}")
            return url
        final_url = str(response.url)
        if final_url != url:
            logger.debug(f"Resolved {url} -> {final_url}")
        return final_url

    async def close(self) -> None:
        await self._client.aclose()
