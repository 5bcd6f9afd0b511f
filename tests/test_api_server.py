"""Tests for the HTTP API surface."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from conftest import NOW
from dependency_injector import providers
from fastapi.testclient import TestClient

from news_aggregator.api import create_app
from news_aggregator.container import create_container
from news_aggregator.infrastructure.sources.newsdata import NewsDataClient, SearchResult
from news_aggregator.shared.settings import Settings


@pytest.fixture
def api_client(newsdata_record):
    client = AsyncMock(spec=NewsDataClient)
    client.search.return_value = SearchResult(records=[newsdata_record], total_results=42, next_page="tok-2")
    return client


@pytest.fixture
def make_http(store):
    clients = []

    def _make(newsdata_client=None) -> TestClient:
        container = create_container(Settings(prefetch_enabled=False))
        container.article_store.override(providers.Object(store))
        if newsdata_client is not None:
            container.newsdata_client.override(providers.Object(newsdata_client))
        http = TestClient(create_app(container=container))
        http.__enter__()
        clients.append(http)
        return http

    yield _make
    for http in clients:
        http.__exit__(None, None, None)


@pytest.fixture
def http(make_http, api_client):
    return make_http(api_client)


class TestHealth:
    def test_health(self, http):
        body = http.get("/health").json()
        assert body["status"] == "healthy"
        assert body["storedArticles"] == 35
        assert body["prefetchRunning"] is False

    def test_recent_article_cache_stats(self, http):
        http.get("/news")
        http.get("/news/a1b2c3d4e5f6")
        http.get("/news/does-not-exist")

        body = http.get("/health").json()

        assert body["recentArticles"] == 11
        assert body["recentCacheHitRate"] == 0.5


class TestListNews:
    def test_merged_listing(self, http):
        response = http.get("/news")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert len(body["results"]) == 11
        assert body["totalResults"] == 77
        assert body["nextPage"] == "tok-2"
        assert body["pagination"] == {"page": 1, "limit": 10, "total": 35, "pages": 4}
        assert body["errorType"] is None
        first = body["results"][0]
        assert {"id", "title", "publishedAt", "sourceName", "sourceId", "imageUrl"} <= set(first)

    def test_missing_api_key_is_not_an_error_status(self, make_http):
        response = make_http().get("/news", params={"page": 2, "limit": 5})
        assert response.status_code == 200
        body = response.json()
        assert body["results"] == []
        assert body["totalResults"] == 0
        assert body["errorType"] == "configuration"
        assert "NEWSDATA_API_KEY" in body["message"]
        assert body["pagination"] == {"page": 2, "limit": 5, "total": 0, "pages": 0}

    def test_query_aliases(self, http, api_client):
        http.get("/news", params={"from": "2024-06-01", "to": "2024-06-15", "nextPage": "tok-1", "q": "ransomware"})
        query = api_client.search.await_args.args[0]
        assert query.from_date == "2024-06-01"
        assert query.to_date == "2024-06-15"
        assert query.next_page == "tok-1"
        assert query.q == "ransomware"

    def test_invalid_date(self, http, api_client):
        body = http.get("/news", params={"from": "15-06-2024"}).json()
        assert body["errorType"] == "validation"
        assert body["results"] == []
        api_client.search.assert_not_awaited()

    def test_limit_is_clamped(self, http):
        body = http.get("/news", params={"limit": 1000}).json()
        assert body["pagination"]["limit"] == 100


class TestRssNews:
    def test_pagination(self, http):
        body = http.get("/news/rss", params={"page": 3, "limit": 10, "category": "Cybersecurity"}).json()
        assert len(body["results"]) == 5
        assert body["pagination"] == {"page": 3, "limit": 10, "total": 25, "pages": 3}
        assert body["nextPage"] is None


class TestCheckUpdates:
    def test_snapshot_after_listing(self, http, api_client):
        http.get("/news")
        api_client.search.reset_mock()

        body = http.get("/news/check-updates").json()

        assert body["articleCount"] == 77
        assert body["nextPage"] == "tok-2"
        assert body["lastRefreshedAt"] is not None
        api_client.search.assert_not_called()

    def test_since(self, http):
        since = (NOW - timedelta(minutes=30)).isoformat()
        body = http.get("/news/check-updates", params={"since": since}).json()
        assert body["newArticlesCount"] == 1
        assert body["hasUpdates"] is True
        assert body["latestArticles"][0]["id"] == "rss-0000"

    def test_invalid_since(self, http):
        response = http.get("/news/check-updates", params={"since": "whenever"})
        assert response.status_code == 200
        assert response.json()["errorType"] == "validation"


class TestArticle:
    def test_stored_article(self, http):
        response = http.get("/news/rss-0001")
        assert response.status_code == 200
        assert response.json()["sourceName"] == "Krebs on Security"

    def test_api_article_after_listing(self, http):
        http.get("/news")
        assert http.get("/news/a1b2c3d4e5f6").json()["sourceId"] == "newsdata"

    def test_not_found(self, http):
        response = http.get("/news/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"detail": "Article not found"}


class TestWrites:
    @pytest.mark.parametrize(
        ("method", "path"),
        [("POST", "/news"), ("PUT", "/news/rss-0001"), ("DELETE", "/news/rss-0001")],
    )
    def test_read_only(self, http, method, path):
        response = http.request(method, path)
        assert response.status_code == 405
        assert "not supported" in response.json()["detail"]
