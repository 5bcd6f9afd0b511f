"""Tests for redirect dereferencing."""

from __future__ import annotations

import httpx

from news_aggregator.infrastructure.sources import LinkResolver

AGGREGATOR_URL = "https://news.google.com/rss/articles/CBMi123"
ARTICLE_URL = "https://www.example.com/story"


def redirecting_client(head_status: int = 302) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == AGGREGATOR_URL:
            if request.method == "HEAD" and head_status == 405:
                return httpx.Response(405)
            return httpx.Response(302, headers={"Location": ARTICLE_URL})
        if str(request.url).startswith("https://broken"):
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestLinkResolver:
    async def test_follows_redirects(self):
        assert await LinkResolver(client=redirecting_client()).resolve(AGGREGATOR_URL) == ARTICLE_URL

    async def test_falls_back_to_get(self):
        resolver = LinkResolver(client=redirecting_client(head_status=405))
        assert await resolver.resolve(AGGREGATOR_URL) == ARTICLE_URL

    async def test_unchanged_without_redirect(self):
        assert await LinkResolver(client=redirecting_client()).resolve(ARTICLE_URL) == ARTICLE_URL

    async def test_failure_keeps_original(self):
        url = "https://broken.example.com/a"
        assert await LinkResolver(client=redirecting_client()).resolve(url) == url

    async def test_empty(self):
        assert await LinkResolver(client=redirecting_client()).resolve("") == ""

    async def test_close(self):
        client = redirecting_client()
        await LinkResolver(client=client).close()
        assert client.is_closed
