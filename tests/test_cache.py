"""Tests for the recent-article cache and the cache metadata holder."""

from __future__ import annotations

from conftest import NOW

from news_aggregator.domain.entities import CacheMetadata
from news_aggregator.infrastructure.cache import CacheMetadataStore, RecentArticleCache


class TestRecentArticleCache:
    def test_remember_and_get(self, make_article):
        cache = RecentArticleCache()
        assert cache.remember([make_article("a"), make_article("b")]) == 2
        assert cache.get("a").id == "a"
        assert cache.get(" b ").id == "b"
        assert "a" in cache
        assert len(cache) == 2

    def test_miss(self):
        cache = RecentArticleCache()
        assert cache.get("missing") is None
        assert cache.stats.misses == 1
        assert cache.stats.hit_rate == 0.0

    def test_stats(self, make_article):
        cache = RecentArticleCache()
        cache.remember([make_article("a")])
        cache.get("a")
        cache.get("x")
        assert cache.stats.hits == 1
        assert cache.stats.hit_rate == 0.5

    def test_lru_eviction(self, make_article):
        cache = RecentArticleCache(max_size=2)
        cache.remember([make_article("a"), make_article("b"), make_article("c")])
        assert "a" not in cache
        assert len(cache) == 2


class TestCacheMetadataStore:
    def test_initial_snapshot(self):
        snapshot = CacheMetadataStore().snapshot()
        assert snapshot.article_count == 0
        assert snapshot.to_dict() == {"articleCount": 0, "nextPage": None, "lastRefreshedAt": None}

    def test_publish_replaces_wholesale(self):
        holder = CacheMetadataStore()
        old = holder.snapshot()
        holder.publish(CacheMetadata(article_count=5, next_page_token="tok", last_refreshed_at=NOW))
        assert old.article_count == 0
        assert holder.snapshot().to_dict() == {
            "articleCount": 5,
            "nextPage": "tok",
            "lastRefreshedAt": "2024-06-15T12:00:00+00:00",
        }
