"""
Domain Layer - Core news entities

Contains:
- entities: Article, Category taxonomy, FeedSource, StoredRSSArticle, CacheMetadata
"""

from .entities import (
    Article,
    CacheMetadata,
    Category,
    FeedSource,
    StoredRSSArticle,
)

__all__ = [
    "Article",
    "CacheMetadata",
    "Category",
    "FeedSource",
    "StoredRSSArticle",
]
