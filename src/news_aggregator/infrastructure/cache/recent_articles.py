"""
Recent Article Cache

In-memory TTL cache of articles recently served by ``GET /news``, so that
``GET /news/{id}`` can answer for API articles, which are never stored.
Uses cachetools.TTLCache for LRU eviction and TTL expiration.

Advisory only: a miss simply means "not found".
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from cachetools import TTLCache

from news_aggregator.domain.entities import Article

logger = logging.getLogger(__name__)


class RecentArticleCache:
    """
    Article lookup by id.

    Example:
        cache = RecentArticleCache(max_size=2000, ttl=3600)
        cache.remember(articles)
        article = cache.get("newsdata-1718000000000-a1b2c3d4")
    """

    def __init__(
        self,
        max_size: int = 2000,
        ttl: float = 3600.0,
    ):
        """
        Initialize cache.

        Args:
            max_size: Maximum number of entries
            ttl: Time-to-live in seconds
        """
        self._cache: TTLCache[str, Article] = TTLCache(maxsize=max_size, ttl=ttl)
        self._stats = CacheStats()

    @property
    def stats(self) -> CacheStats:
        return self._stats

    def get(self, article_id: str) -> Article | None:
        try:
            article = self._cache[article_id.strip()]
            self._stats.hits += 1
            return article
        except KeyError:
            self._stats.misses += 1
            return None

    def remember(self, articles: Iterable[Article]) -> int:
        """Store articles by id. Returns how many were stored."""
        count = 0
        for article in articles:
            self._cache[article.id] = article
            count += 1
        if count:
            logger.debug(f"Remembered {count} served articles")
        return count

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, article_id: str) -> bool:
        return article_id in self._cache


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0-1)."""
        total = self.total_requests
        return self.hits / total if total > 0 else 0.0
