"""
Prefetch job - periodic background refresh

Every tick:
1. refresh RSS feeds into the article store
2. fetch the first NewsData.io page (modest fixed size) to warm the
   recent-article cache
3. publish fresh CacheMetadata, whatever happened in 1 and 2

Fire-and-forget: failures are logged, never retried within a tick and never
raised past ``run_once``.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from news_aggregator.application.news.errors import classify_error
from news_aggregator.application.news.normalizer import ArticleNormalizer
from news_aggregator.application.news.refresher import FeedRefresher
from news_aggregator.domain.entities import CacheMetadata, utc_now
from news_aggregator.infrastructure.cache import CacheMetadataStore, RecentArticleCache
from news_aggregator.infrastructure.sources.newsdata import NewsDataClient, SearchQuery
from news_aggregator.infrastructure.store import RSSArticleStore, StoreCriteria
from news_aggregator.shared.exceptions import NewsAggregatorError

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 900.0
DEFAULT_PAGE_SIZE = 50


class PrefetchJob:
    """
    Background refresh loop on an asyncio task.

    Usage:
        job = PrefetchJob(refresher, client, normalizer, store, recent, metadata)
        job.start()
        ...
        await job.stop()
    """

    def __init__(
        self,
        refresher: FeedRefresher,
        client: NewsDataClient,
        normalizer: ArticleNormalizer,
        store: RSSArticleStore,
        recent_articles: RecentArticleCache,
        metadata: CacheMetadataStore,
        interval: float = DEFAULT_INTERVAL,
        page_size: int = DEFAULT_PAGE_SIZE,
        language: str = "en",
    ) -> None:
        self._refresher = refresher
        self._client = client
        self._normalizer = normalizer
        self._store = store
        self._recent = recent_articles
        self._metadata = metadata
        self._interval = interval
        self._page_size = page_size
        self._language = language
        self._task: asyncio.Task[None] | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> CacheMetadata:
        """One tick. Always returns the metadata it published."""
        api_total = 0
        next_page: str | None = None

        try:
            await self._refresher.refresh()
        except Exception:
            logger.exception("Prefetch: feed refresh failed")

        try:
            result = await self._client.search(SearchQuery(language=self._language, size=self._page_size))
            api_total = result.total_results
            next_page = result.next_page
            self._recent.remember(self._normalizer.from_search_records(result.records))
        except NewsAggregatorError as e:
            classified = classify_error(e)
            logger.warning(f"Prefetch: news API skipped ({classified.kind.value}): {e}")
        except Exception:
            logger.exception("Prefetch: news API fetch failed")

        try:
            stored = await self._store.count(StoreCriteria())
        except Exception:
            logger.exception("Prefetch: article store count failed")
            stored = 0

        metadata = CacheMetadata(
            article_count=api_total + stored,
            next_page_token=next_page,
            last_refreshed_at=utc_now(),
        )
        self._metadata.publish(metadata)
        self.ticks += 1
        logger.info(f"Prefetch tick {self.ticks}: {metadata.article_count} articles available")
        return metadata

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        """Start the loop; the first tick runs immediately. Idempotent."""
        if self.running:
            return
        logger.info(f"Starting prefetch job (every {self._interval:.0f}s, page size {self._page_size})")
        self._task = asyncio.create_task(self._loop(), name="news-prefetch")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Prefetch job stopped")
