"""
Feed refresher: fetch every active feed and store items not seen before.

This is the collaborator-side writer of the article store; the request path
only reads from it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from news_aggregator.application.news.normalizer import ArticleNormalizer
from news_aggregator.infrastructure.sources.rss import RSSAdapter
from news_aggregator.infrastructure.store import WritableRSSArticleStore

logger = logging.getLogger(__name__)


@dataclass
class RefreshReport:
    feeds: int = 0
    fetched: int = 0
    stored: int = 0
    skipped: int = 0


class FeedRefresher:
    """
    Pulls feeds into the article store.

    Items without a link cannot be deduplicated across refreshes and are
    skipped, as are links already stored.
    """

    def __init__(
        self,
        adapter: RSSAdapter,
        store: WritableRSSArticleStore,
        normalizer: ArticleNormalizer,
    ) -> None:
        self._adapter = adapter
        self._store = store
        self._normalizer = normalizer

    async def refresh(self) -> RefreshReport:
        feeds = await self._store.list_feeds(active_only=True)
        items = await self._adapter.fetch_all(feeds)
        report = RefreshReport(feeds=len(feeds), fetched=len(items))

        new_articles = []
        batch_links: set[str] = set()
        for item in items:
            if not item.link or item.link in batch_links or await self._store.has_link(item.link):
                report.skipped += 1
                continue
            batch_links.add(item.link)
            article = self._normalizer.from_rss_item(item)
            new_articles.append(self._normalizer.to_stored(article, item.feed_id))

        report.stored = await self._store.ingest(new_articles)
        logger.info(
            f"Feed refresh: {report.fetched} items from {report.feeds} feeds, "
            f"{report.stored} stored, {report.skipped} skipped"
        )
        return report
