"""
News use cases: normalization, filtering, ranking, pagination, aggregation
and background prefetch.
"""

from .errors import ERROR_MESSAGES, ClassifiedError, classify_error, log_degraded
from .normalizer import ArticleNormalizer, generate_article_id, stored_article_id
from .pagination import Page, clamp_limit, clamp_page, page_bounds, paginate
from .prefetch import PrefetchJob
from .query import NewsFilter, QueryEngine, QueryResult, build_filter, clean_search_term
from .ranking import KNOWN_SOURCES, SortPolicy, popularity_score, rank, relevance_score, resolve_policy
from .refresher import FeedRefresher, RefreshReport
from .service import NewsRequest, NewsResponse, NewsService, UpdateCheck

__all__ = [
    "ArticleNormalizer",
    "ClassifiedError",
    "ERROR_MESSAGES",
    "FeedRefresher",
    "KNOWN_SOURCES",
    "NewsFilter",
    "NewsRequest",
    "NewsResponse",
    "NewsService",
    "Page",
    "PrefetchJob",
    "QueryEngine",
    "QueryResult",
    "RefreshReport",
    "SortPolicy",
    "UpdateCheck",
    "build_filter",
    "clamp_limit",
    "clamp_page",
    "classify_error",
    "clean_search_term",
    "generate_article_id",
    "log_degraded",
    "page_bounds",
    "paginate",
    "popularity_score",
    "rank",
    "relevance_score",
    "resolve_policy",
    "stored_article_id",
]
