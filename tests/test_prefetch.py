"""Tests for the background prefetch job."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from news_aggregator.application.news import ArticleNormalizer, FeedRefresher, PrefetchJob, RefreshReport
from news_aggregator.infrastructure.cache import CacheMetadataStore, RecentArticleCache
from news_aggregator.infrastructure.sources.newsdata import NewsDataClient, SearchResult
from news_aggregator.shared.exceptions import ConfigurationError


@pytest.fixture
def refresher():
    mock = AsyncMock(spec=FeedRefresher)
    mock.refresh.return_value = RefreshReport(feeds=3, fetched=10, stored=10)
    return mock


@pytest.fixture
def api_client(newsdata_record):
    client = AsyncMock(spec=NewsDataClient)
    client.search.return_value = SearchResult(records=[newsdata_record], total_results=42, next_page="tok-2")
    return client


@pytest.fixture
def make_job(store, refresher):
    def _make(client, **kwargs) -> PrefetchJob:
        return PrefetchJob(
            refresher=refresher,
            client=client,
            normalizer=ArticleNormalizer(),
            store=store,
            recent_articles=kwargs.pop("recent", RecentArticleCache()),
            metadata=kwargs.pop("metadata", CacheMetadataStore()),
            **kwargs,
        )

    return _make


class TestRunOnce:
    async def test_publishes_combined_count(self, make_job, api_client, refresher):
        metadata = CacheMetadataStore()
        recent = RecentArticleCache()
        job = make_job(api_client, metadata=metadata, recent=recent, page_size=25, language="de")

        published = await job.run_once()

        refresher.refresh.assert_awaited_once()
        query = api_client.search.await_args.args[0]
        assert query.size == 25
        assert query.language == "de"
        assert query.next_page is None
        assert published is metadata.snapshot()
        assert published.article_count == 42 + 35
        assert published.next_page_token == "tok-2"
        assert "a1b2c3d4e5f6" in recent
        assert job.ticks == 1

    async def test_publishes_even_when_everything_fails(self, make_job, refresher):
        refresher.refresh.side_effect = RuntimeError("disk on fire")
        client = AsyncMock(spec=NewsDataClient)
        client.search.side_effect = ConfigurationError()
        metadata = CacheMetadataStore()

        published = await make_job(client, metadata=metadata).run_once()

        assert metadata.snapshot() is published
        assert published.article_count == 35
        assert published.next_page_token is None
        assert published.last_refreshed_at is not None

    async def test_unexpected_api_error_is_contained(self, make_job):
        client = AsyncMock(spec=NewsDataClient)
        client.search.side_effect = ValueError("boom")
        published = await make_job(client).run_once()
        assert published.article_count == 35


class TestLifecycle:
    async def test_start_runs_first_tick_immediately(self, make_job, api_client):
        job = make_job(api_client, interval=3600)
        job.start()
        assert job.running
        for _ in range(20):
            if job.ticks:
                break
            await asyncio.sleep(0.01)
        assert job.ticks == 1

        await job.stop()
        assert not job.running

    async def test_start_is_idempotent(self, make_job, api_client):
        job = make_job(api_client, interval=3600)
        job.start()
        task = job._task
        job.start()
        assert job._task is task
        await job.stop()

    async def test_stop_without_start(self, make_job, api_client):
        await make_job(api_client).stop()
