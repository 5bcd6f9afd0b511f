"""
Source Adapters

- newsdata: NewsData.io search API (live, never stored)
- rss: RSS/Atom feeds via feedparser
- extraction: ordered URL/image extraction strategies
- link_resolver: network dereferencing of aggregator redirect links
"""

from __future__ import annotations

from .base_client import BaseAPIClient
from .link_resolver import LinkResolver
from .newsdata import NewsDataClient, SearchQuery, SearchResult, is_placeholder_api_key
from .rss import RSSAdapter, RSSItem

__all__ = [
    "BaseAPIClient",
    "LinkResolver",
    "NewsDataClient",
    "RSSAdapter",
    "RSSItem",
    "SearchQuery",
    "SearchResult",
    "is_placeholder_api_key",
]
