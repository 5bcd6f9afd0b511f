"""
RSS article store interface.

The pipeline only reads: query by criteria, count by the same criteria,
lookups by id. The write methods exist for the feed refresher, which
populates the store on the collaborator side.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from news_aggregator.domain.entities import FeedSource, StoredRSSArticle


@dataclass(frozen=True)
class StoreCriteria:
    """
    Store-level filter. All fields are optional and combine with AND.

    ``category`` is compared case-insensitively with the stored category name.
    ``search`` is a case-insensitive substring matched against title OR
    description. ``start``/``end`` are inclusive bounds on ``published_at``.
    """

    category: str | None = None
    search: str | None = None
    start: datetime | None = None
    end: datetime | None = None

    def matches(self, article: StoredRSSArticle) -> bool:
        if self.category and str(article.category).lower() != self.category.lower():
            return False
        if self.start is not None and article.published_at < self.start:
            return False
        if self.end is not None and article.published_at > self.end:
            return False
        if self.search:
            needle = self.search.lower()
            if needle not in article.title.lower() and needle not in article.description.lower():
                return False
        return True


@runtime_checkable
class RSSArticleStore(Protocol):
    """Read interface consumed by the aggregation pipeline."""

    async def find(
        self,
        criteria: StoreCriteria,
        *,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[StoredRSSArticle]:
        """Matching articles, newest first (ties by ascending id)."""
        ...

    async def count(self, criteria: StoreCriteria) -> int: ...

    async def get(self, article_id: str) -> StoredRSSArticle | None: ...

    async def list_feeds(self, *, active_only: bool = True) -> list[FeedSource]: ...

    async def get_feed(self, feed_id: str) -> FeedSource | None: ...


@runtime_checkable
class WritableRSSArticleStore(RSSArticleStore, Protocol):
    """Collaborator-side write path used by the feed refresher."""

    async def add_feeds(self, feeds: Iterable[FeedSource]) -> int: ...

    async def has_link(self, link: str) -> bool: ...

    async def ingest(self, articles: Iterable[StoredRSSArticle]) -> int:
        """Insert articles whose link is not stored yet. Returns the number inserted."""
        ...
