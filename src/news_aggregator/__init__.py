"""
News Aggregator - merged, ranked news from a search API and RSS/Atom feeds

Two structurally different sources feed one pipeline:

    NewsData.io search API ─┐
                            ├─ normalize → filter → rank → paginate
    RSS/Atom feeds → store ─┘

Usage:
    from news_aggregator.container import create_container
    from news_aggregator.application.news import NewsRequest

    service = create_container().news_service()
    response = await service.get_news(NewsRequest(q="kubernetes", sort="date"))

    for article in response.results:
        print(f"{article.published_at:%Y-%m-%d} {article.source_name}: {article.title}")

Features:
    - Search API adapter with a closed error taxonomy
    - RSS adapter with embedded-link and image extraction
    - Relevance, date and popularity ranking (total orders)
    - Graceful degradation: upstream failures become classified messages
    - Background prefetch publishing cache metadata
"""

from .domain import Article, CacheMetadata, Category, FeedSource, StoredRSSArticle
from .shared import NewsAggregatorError, Settings

__version__ = "0.1.0"

__all__ = [
    "Article",
    "CacheMetadata",
    "Category",
    "FeedSource",
    "NewsAggregatorError",
    "Settings",
    "StoredRSSArticle",
    "__version__",
]
