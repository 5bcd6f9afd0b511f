"""
RSS Article Store

Queryable half of the news merge: feed configuration and feed items already
fetched and indexed.
"""

from __future__ import annotations

from news_aggregator.infrastructure.store.base import RSSArticleStore, StoreCriteria, WritableRSSArticleStore
from news_aggregator.infrastructure.store.feeds import feed_id_for, load_feeds_yaml
from news_aggregator.infrastructure.store.memory import InMemoryRSSArticleStore

__all__ = [
    "InMemoryRSSArticleStore",
    "RSSArticleStore",
    "StoreCriteria",
    "WritableRSSArticleStore",
    "feed_id_for",
    "load_feeds_yaml",
]
