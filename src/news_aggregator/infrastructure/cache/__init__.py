"""
Cache Infrastructure

Advisory, in-process state for the request path.
"""

from __future__ import annotations

from news_aggregator.infrastructure.cache.metadata import CacheMetadataStore
from news_aggregator.infrastructure.cache.recent_articles import RecentArticleCache

__all__ = [
    "CacheMetadataStore",
    "RecentArticleCache",
]
