"""
NewsService - merge, rank and paginate news from both sources

Request path for every news endpoint:

    NewsData.io batch ─┐
                       ├─ normalize → filter → dedupe → rank → response
    article store page ┘

Contract for ``get_news``:
- The API half is exactly one upstream batch, chosen by ``next_page``;
  ``next_page`` in the response is the upstream token, verbatim.
- The store half is page ``page`` of the filtered local set, described by
  ``pagination``.
- Any taxonomy error yields a well-formed empty response carrying the
  classified message. Nothing in the taxonomy becomes an HTTP 5xx.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from news_aggregator.application.news.errors import ClassifiedError, classify_error, log_degraded
from news_aggregator.application.news.normalizer import ArticleNormalizer
from news_aggregator.application.news.pagination import Page, clamp_limit, clamp_page
from news_aggregator.application.news.query import NewsFilter, QueryEngine, QueryResult, build_filter
from news_aggregator.application.news.ranking import SortPolicy, rank, resolve_policy
from news_aggregator.domain.entities import Article, CacheMetadata, utc_now
from news_aggregator.infrastructure.cache import CacheMetadataStore, RecentArticleCache
from news_aggregator.infrastructure.sources.newsdata import NewsDataClient, SearchQuery, SearchResult
from news_aggregator.infrastructure.store import RSSArticleStore, StoreCriteria
from news_aggregator.shared.async_utils import gather_with_errors
from news_aggregator.shared.dates import parse_datetime
from news_aggregator.shared.exceptions import (
    ErrorContext,
    NewsAggregatorError,
    NotFoundError,
    UnsupportedOperationError,
    ValidationError,
)

logger = logging.getLogger(__name__)

LATEST_ARTICLES_LIMIT = 3

UNSUPPORTED_WRITE_MESSAGE = (
    "{action} news articles is not supported. News is aggregated from external sources and is read-only."
)


@dataclass
class NewsRequest:
    """Raw query parameters of ``GET /news``."""

    page: int = 1
    limit: int = 10
    q: str | None = None
    category: str | None = None
    date_from: str | None = None
    date_to: str | None = None
    language: str | None = None
    source: str | None = None
    sort: str | None = None
    next_page: str | None = None


@dataclass
class NewsResponse:
    """Body of every news listing response."""

    results: list[Article] = field(default_factory=list)
    total_results: int = 0
    next_page: str | None = None
    pagination: Page = field(default_factory=Page)
    message: str | None = None
    error_type: str | None = None
    status: str = "success"

    @classmethod
    def degraded(cls, error: ClassifiedError, page: int = 1, limit: int = 10) -> NewsResponse:
        return cls(
            pagination=Page(page=page, limit=limit, total=0),
            message=error.message,
            error_type=error.kind.value,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "results": [article.to_dict() for article in self.results],
            "totalResults": self.total_results,
            "nextPage": self.next_page,
            "pagination": self.pagination.to_dict(),
            "message": self.message,
            "errorType": self.error_type,
        }


@dataclass
class UpdateCheck:
    """Snapshot for ``GET /news/check-updates``."""

    metadata: CacheMetadata
    new_articles_count: int | None = None
    latest_articles: list[Article] = field(default_factory=list)

    @property
    def has_updates(self) -> bool:
        return bool(self.new_articles_count)

    def to_dict(self) -> dict[str, Any]:
        data = self.metadata.to_dict()
        if self.new_articles_count is not None:
            data["newArticlesCount"] = self.new_articles_count
            data["hasUpdates"] = self.has_updates
            data["latestArticles"] = [
                {
                    "id": a.id,
                    "title": a.title,
                    "link": a.link,
                    "sourceName": a.source_name,
                    "publishedAt": a.published_at.isoformat(),
                }
                for a in self.latest_articles
            ]
        return data


class NewsService:
    """
    Aggregation use cases behind the HTTP surface.

    All collaborators are injected; the service holds no clients of its own.
    """

    def __init__(
        self,
        client: NewsDataClient,
        store: RSSArticleStore,
        normalizer: ArticleNormalizer,
        query_engine: QueryEngine,
        recent_articles: RecentArticleCache,
        metadata: CacheMetadataStore,
        language: str = "en",
    ) -> None:
        self._client = client
        self._store = store
        self._normalizer = normalizer
        self._query = query_engine
        self._recent = recent_articles
        self._metadata = metadata
        self._language = language

    # =========================================================================
    # Listing
    # =========================================================================

    async def get_news(self, request: NewsRequest) -> NewsResponse:
        """Merged listing. Never raises for taxonomy errors."""
        page, limit = clamp_page(request.page), clamp_limit(request.limit)
        try:
            return await self._get_news(request, page, limit)
        except NewsAggregatorError as e:
            classified = classify_error(e)
            log_degraded("News request", e, classified)
            return NewsResponse.degraded(classified, page=page, limit=limit)

    async def _get_news(self, request: NewsRequest, page: int, limit: int) -> NewsResponse:
        # Both validations run before any network call
        policy = resolve_policy(request.sort, request.q)
        news_filter = build_filter(
            category=request.category,
            q=request.q,
            date_from=request.date_from,
            date_to=request.date_to,
            source=request.source,
        )
        query = SearchQuery(
            q=news_filter.search,
            category=request.category,
            from_date=request.date_from,
            to_date=request.date_to,
            language=request.language or self._language,
            source=news_filter.source,
            sort=policy.value,
            size=limit,
            next_page=request.next_page,
        )

        upstream, local = await self._fetch_both(query, news_filter, page, limit, policy)

        api_articles = self._normalizer.from_search_records(upstream.records, category_hint=request.category)
        await self._normalizer.dereference(api_articles)
        # Upstream date bounds are not enforced and undated records carry the
        # fetch time: the API half goes through the same filter as the store
        api_articles = [a for a in api_articles if news_filter.matches(a)]

        merged = self._normalizer.deduplicate([*api_articles, *local.articles])
        ranked = rank(merged, policy, news_filter.search)
        self._recent.remember(ranked)

        total = upstream.total_results + local.total
        if not request.next_page:
            self.publish_metadata(total, upstream.next_page)

        logger.info(
            f"News: {len(api_articles)} API + {len(local.articles)} stored -> {len(ranked)} merged "
            f"(policy={policy.value}, page={page})"
        )
        return NewsResponse(
            results=ranked,
            total_results=total,
            next_page=upstream.next_page,
            pagination=Page(items=local.articles, page=page, limit=limit, total=local.total),
            message=upstream.message if not ranked else None,
        )

    async def _fetch_both(
        self,
        query: SearchQuery,
        news_filter: NewsFilter,
        page: int,
        limit: int,
        policy: SortPolicy,
    ) -> tuple[SearchResult, QueryResult]:
        upstream, local = await gather_with_errors(
            self._client.search(query),
            self._query.run(news_filter, page=page, limit=limit, policy=policy),
            return_exceptions=True,
        )
        for outcome in (upstream, local):
            if isinstance(outcome, Exception):
                raise outcome
        return upstream, local  # type: ignore[return-value]

    async def get_rss_news(
        self,
        page: int = 1,
        limit: int = 10,
        q: str | None = None,
        category: str | None = None,
    ) -> NewsResponse:
        """Local store only, with its own pagination."""
        page, limit = clamp_page(page), clamp_limit(limit)
        try:
            news_filter = build_filter(category=category, q=q)
            policy = resolve_policy(None, q)
            local = await self._query.run(news_filter, page=page, limit=limit, policy=policy)
        except NewsAggregatorError as e:
            classified = classify_error(e)
            log_degraded("RSS news request", e, classified)
            return NewsResponse.degraded(classified, page=page, limit=limit)

        self._recent.remember(local.articles)
        return NewsResponse(
            results=local.articles,
            total_results=local.total,
            pagination=Page(items=local.articles, page=page, limit=limit, total=local.total),
        )

    # =========================================================================
    # Single article / updates
    # =========================================================================

    async def get_article(self, article_id: str) -> Article:
        """
        Look up one article: store first, then recently served API articles.

        Raises:
            NotFoundError: Unknown id
        """
        stored = await self._store.get(article_id)
        if stored is not None:
            feed = await self._store.get_feed(stored.feed_id)
            feeds = {feed.id: feed} if feed else {}
            return self._normalizer.from_stored([stored], feeds)[0]

        cached = self._recent.get(article_id)
        if cached is not None:
            return cached

        raise NotFoundError("Article", article_id)

    async def check_updates(self, since: str | None = None) -> UpdateCheck:
        """
        Current cache metadata, plus store activity after ``since``.

        No upstream call is made.

        Raises:
            ValidationError: ``since`` is not a timestamp
        """
        snapshot = self._metadata.snapshot()
        if not since or not since.strip():
            return UpdateCheck(metadata=snapshot)

        since_dt = parse_datetime(since.strip())
        if since_dt is None:
            raise ValidationError(
                f"Invalid 'since' timestamp: {since}",
                context=ErrorContext(input_value=since, suggestion="Use an ISO-8601 timestamp"),
            )

        criteria = StoreCriteria(start=since_dt)
        count = await self._store.count(criteria)
        latest = await self._store.find(criteria, limit=LATEST_ARTICLES_LIMIT)
        feeds = {feed.id: feed for feed in await self._store.list_feeds(active_only=False)}
        return UpdateCheck(
            metadata=snapshot,
            new_articles_count=count,
            latest_articles=self._normalizer.from_stored(latest, feeds),
        )

    def publish_metadata(self, article_count: int, next_page_token: str | None) -> CacheMetadata:
        metadata = CacheMetadata(
            article_count=article_count,
            next_page_token=next_page_token,
            last_refreshed_at=utc_now(),
        )
        self._metadata.publish(metadata)
        return metadata

    async def stored_article_count(self) -> int:
        return await self._store.count(StoreCriteria())

    # =========================================================================
    # Writes (unsupported)
    # =========================================================================

    async def create_article(self, payload: dict[str, Any] | None = None) -> None:
        raise UnsupportedOperationError(UNSUPPORTED_WRITE_MESSAGE.format(action="Creating"))

    async def update_article(self, article_id: str, payload: dict[str, Any] | None = None) -> None:
        raise UnsupportedOperationError(UNSUPPORTED_WRITE_MESSAGE.format(action="Updating"))

    async def delete_article(self, article_id: str) -> None:
        raise UnsupportedOperationError(UNSUPPORTED_WRITE_MESSAGE.format(action="Deleting"))
