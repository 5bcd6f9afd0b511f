"""
Query/Filter Engine for the local article store.

Two-stage filter:
1. Category, free text and date range are pushed down to the store, which
   also counts matches with the same criteria.
2. The source filter runs afterwards on normalized articles, because a
   source name is only known once a stored article is joined to its feed.

``total`` therefore reflects stage 1 only.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, time, timezone

from news_aggregator.application.news.normalizer import ArticleNormalizer
from news_aggregator.application.news.pagination import page_bounds, paginate
from news_aggregator.application.news.ranking import SortPolicy, rank
from news_aggregator.domain.entities import Article, Category, StoredRSSArticle
from news_aggregator.infrastructure.store import RSSArticleStore, StoreCriteria
from news_aggregator.shared.exceptions import ErrorContext, ValidationError
from news_aggregator.shared.validation import parse_date_filter

logger = logging.getLogger(__name__)

_FIELD_PREFIX = re.compile(r"^\s*(?:title|content)\s*:\s*", re.IGNORECASE)
_QUOTES = "\"'“”‘’"

END_OF_DAY = time(23, 59, 59, 999000)


def clean_search_term(q: str | None) -> str | None:
    """Strip a leading ``title:``/``content:`` prefix and surrounding quotes."""
    if not q:
        return None
    term = _FIELD_PREFIX.sub("", q).strip().strip(_QUOTES).strip()
    return term or None


@dataclass(frozen=True)
class NewsFilter:
    """Composite filter over articles."""

    category: str | None = None
    search: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    source: str | None = None

    def to_store_criteria(self) -> StoreCriteria:
        return StoreCriteria(category=self.category, search=self.search, start=self.start, end=self.end)

    def matches_source(self, article: Article) -> bool:
        if not self.source:
            return True
        return self.source.lower() in article.source_name.lower()

    def matches(self, article: Article) -> bool:
        """Apply every criterion, including the source filter."""
        if self.category and article.category.value.lower() != self.category.lower():
            return False
        if self.start is not None and article.published_at < self.start:
            return False
        if self.end is not None and article.published_at > self.end:
            return False
        if self.search:
            needle = self.search.lower()
            if needle not in article.title.lower() and needle not in article.description.lower():
                return False
        return self.matches_source(article)


def build_filter(
    category: str | None = None,
    q: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    source: str | None = None,
) -> NewsFilter:
    """
    Build a ``NewsFilter`` from raw request parameters.

    Dates are ``YYYY-MM-DD``; ``from`` starts at 00:00:00.000 and ``to`` ends
    at 23:59:59.999, both UTC. Known category aliases ("health", "startups")
    resolve to their canonical name; an unknown category is kept as given and
    matches no stored article.

    Raises:
        InvalidDateError: Malformed date
        ValidationError: ``from`` after ``to``
    """
    start_date = parse_date_filter(date_from, "from")
    end_date = parse_date_filter(date_to, "to")
    if start_date and end_date and start_date > end_date:
        raise ValidationError(
            f"Invalid date range: 'from' ({date_from}) is after 'to' ({date_to})",
            context=ErrorContext(input_value={"from": date_from, "to": date_to}),
        )

    category_name: str | None = None
    if category and category.strip():
        known = Category.parse(category)
        category_name = known.value if known else category.strip()

    return NewsFilter(
        category=category_name,
        search=clean_search_term(q),
        start=datetime.combine(start_date, time.min, tzinfo=timezone.utc) if start_date else None,
        end=datetime.combine(end_date, END_OF_DAY, tzinfo=timezone.utc) if end_date else None,
        source=source.strip() if source and source.strip() else None,
    )


@dataclass
class QueryResult:
    articles: list[Article] = field(default_factory=list)
    total: int = 0


class QueryEngine:
    """
    Runs a ``NewsFilter`` against the article store.

    Date order is pushed down to the store (it returns newest first with
    ascending id as tie-break, the same total order the ranker uses). Other
    policies rank the whole filtered set before slicing so pages stay stable.
    """

    def __init__(self, store: RSSArticleStore, normalizer: ArticleNormalizer) -> None:
        self._store = store
        self._normalizer = normalizer

    async def run(
        self,
        news_filter: NewsFilter,
        *,
        page: int = 1,
        limit: int = 10,
        policy: SortPolicy = SortPolicy.DATE,
    ) -> QueryResult:
        criteria = news_filter.to_store_criteria()
        skip, limit = page_bounds(page, limit)
        total = await self._store.count(criteria)

        if policy is SortPolicy.DATE:
            stored = await self._store.find(criteria, skip=skip, limit=limit)
            articles = rank(await self._normalize(stored, news_filter), policy, news_filter.search)
        else:
            stored = await self._store.find(criteria)
            ranked = rank(await self._normalize(stored, news_filter), policy, news_filter.search)
            articles = paginate(ranked, page, limit).items

        articles = [a for a in articles if news_filter.matches_source(a)]
        logger.debug(f"Store query matched {total}, returning {len(articles)} (skip={skip}, limit={limit})")
        return QueryResult(articles=articles, total=total)

    async def _normalize(self, stored: list[StoredRSSArticle], news_filter: NewsFilter) -> list[Article]:
        feeds = {feed.id: feed for feed in await self._store.list_feeds(active_only=False)}
        return self._normalizer.from_stored(stored, feeds, category_hint=news_filter.category)
