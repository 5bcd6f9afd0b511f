"""
In-memory RSS article store.

Reference implementation of ``RSSArticleStore`` for a single process. Any
indexed document collection offering the same queries can replace it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from news_aggregator.domain.entities import FeedSource, StoredRSSArticle
from news_aggregator.infrastructure.store.base import StoreCriteria

logger = logging.getLogger(__name__)


def _newest_first(article: StoredRSSArticle) -> tuple[float, str]:
    return (-article.published_at.timestamp(), article.id)


class InMemoryRSSArticleStore:
    """
    Dict-backed store keyed by article id, with a link index.

    Example:
        store = InMemoryRSSArticleStore()
        await store.add_feeds(load_feeds_yaml("feeds.yaml"))
        await store.ingest(stored_articles)
        page = await store.find(StoreCriteria(search="kubernetes"), skip=0, limit=10)
    """

    def __init__(
        self,
        feeds: Iterable[FeedSource] = (),
        articles: Iterable[StoredRSSArticle] = (),
    ) -> None:
        self._feeds: dict[str, FeedSource] = {}
        self._articles: dict[str, StoredRSSArticle] = {}
        self._links: set[str] = set()
        for feed in feeds:
            self._feeds.setdefault(feed.id, feed)
        for article in articles:
            self._insert(article)

    def _insert(self, article: StoredRSSArticle) -> bool:
        if article.id in self._articles or (article.link and article.link in self._links):
            return False
        self._articles[article.id] = article
        if article.link:
            self._links.add(article.link)
        return True

    # ------------------------------------------------------------------
    # Read interface
    # ------------------------------------------------------------------

    async def find(
        self,
        criteria: StoreCriteria,
        *,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[StoredRSSArticle]:
        matches = sorted(
            (a for a in self._articles.values() if criteria.matches(a)),
            key=_newest_first,
        )
        start = max(skip, 0)
        if limit is None:
            return matches[start:]
        return matches[start : start + max(limit, 0)]

    async def count(self, criteria: StoreCriteria) -> int:
        return sum(1 for a in self._articles.values() if criteria.matches(a))

    async def get(self, article_id: str) -> StoredRSSArticle | None:
        return self._articles.get(article_id)

    async def list_feeds(self, *, active_only: bool = True) -> list[FeedSource]:
        return [f for f in self._feeds.values() if f.is_active or not active_only]

    async def get_feed(self, feed_id: str) -> FeedSource | None:
        return self._feeds.get(feed_id)

    # ------------------------------------------------------------------
    # Write path (feed refresher only)
    # ------------------------------------------------------------------

    async def add_feeds(self, feeds: Iterable[FeedSource]) -> int:
        added = 0
        known_urls = {f.url for f in self._feeds.values()}
        for feed in feeds:
            if feed.id in self._feeds or feed.url in known_urls:
                continue
            self._feeds[feed.id] = feed
            known_urls.add(feed.url)
            added += 1
        return added

    async def has_link(self, link: str) -> bool:
        return link in self._links

    async def ingest(self, articles: Iterable[StoredRSSArticle]) -> int:
        inserted = sum(1 for article in articles if self._insert(article))
        if inserted:
            logger.info(f"Stored {inserted} new feed articles ({len(self._articles)} total)")
        return inserted

    def __len__(self) -> int:
        return len(self._articles)
