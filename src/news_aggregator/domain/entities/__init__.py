"""
Domain Entities

Core business objects for news aggregation.
"""

from __future__ import annotations

from .article import (
    DEFAULT_TITLE,
    UPSTREAM_CATEGORY_MAP,
    Article,
    CacheMetadata,
    Category,
    FeedSource,
    StoredRSSArticle,
    map_category_to_upstream,
    utc_now,
)

__all__ = [
    "Article",
    "CacheMetadata",
    "Category",
    "DEFAULT_TITLE",
    "FeedSource",
    "StoredRSSArticle",
    "UPSTREAM_CATEGORY_MAP",
    "map_category_to_upstream",
    "utc_now",
]
