"""
ArticleNormalizer - Source-native records to the unified Article shape

Inputs:
- NewsData.io result records (dicts, camelCase-free snake_case fields)
- RSS items straight from the feed adapter
- Stored RSS articles from the article store (joined with their FeedSource)

Every field gets an explicit, stable default so downstream filtering and
ranking never branch on None. Sparse records are never dropped.

Example:
    >>> normalizer = ArticleNormalizer()
    >>> articles = normalizer.from_search_records(result.records, category_hint="AI")
    >>> articles = normalizer.deduplicate(articles)
"""

from __future__ import annotations

import hashlib
import logging
import secrets
import time
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from news_aggregator.domain.entities import (
    DEFAULT_TITLE,
    Article,
    Category,
    FeedSource,
    StoredRSSArticle,
    utc_now,
)
from news_aggregator.infrastructure.sources.extraction import is_blocked_host, strip_html
from news_aggregator.infrastructure.sources.link_resolver import LinkResolver
from news_aggregator.infrastructure.sources.rss import RSSItem
from news_aggregator.shared.async_utils import gather_with_errors
from news_aggregator.shared.dates import parse_datetime
from news_aggregator.shared.settings import DEFAULT_AGGREGATOR_DOMAINS

logger = logging.getLogger(__name__)

NEWSDATA_SOURCE_ID = "newsdata"
NEWSDATA_SOURCE_NAME = "NewsData.io"
RSS_SOURCE_ID = "rss"

# Free-tier NewsData.io responses replace paid fields with this text
PAYWALL_MARKERS = ("ONLY AVAILABLE IN PAID PLANS",)


def generate_article_id(tag: str) -> str:
    """Synthetic id: ``<tag>-<epoch ms>-<8 hex chars>``."""
    return f"{tag}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def stored_article_id(link: str) -> str:
    """Stable id for a stored feed article, derived from its link."""
    return f"{RSS_SOURCE_ID}-{hashlib.sha1(link.encode('utf-8')).hexdigest()[:16]}"


def clean_text(value: Any) -> str:
    """Plain text with paywall placeholders treated as missing."""
    if value is None:
        return ""
    text = strip_html(str(value))
    if any(marker in text.upper() for marker in PAYWALL_MARKERS):
        return ""
    return text


def _as_string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, Iterable):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return []


def _first_category(value: Any) -> Any:
    # NewsData.io sends category as a list of upstream names
    if isinstance(value, list):
        return value[0] if value else None
    return value


class ArticleNormalizer:
    """Maps source-native records to ``Article``."""

    def __init__(
        self,
        resolver: LinkResolver | None = None,
        aggregator_domains: Iterable[str] = DEFAULT_AGGREGATOR_DOMAINS,
    ) -> None:
        self._resolver = resolver
        self._aggregator_domains = tuple(d.lower() for d in aggregator_domains)

    # =========================================================================
    # Search API
    # =========================================================================

    def from_search_record(self, record: Mapping[str, Any], category_hint: str | None = None) -> Article:
        hint = Category.parse(category_hint)
        title = clean_text(record.get("title")) or DEFAULT_TITLE
        description = clean_text(record.get("description"))
        content = clean_text(record.get("content")) or description

        return Article(
            id=str(record.get("article_id") or "").strip() or generate_article_id(NEWSDATA_SOURCE_ID),
            title=title,
            description=description,
            content=content,
            link=str(record.get("link") or "").strip(),
            image_url=str(record.get("image_url") or "").strip() or None,
            published_at=parse_datetime(record.get("pubDate")) or utc_now(),
            # The active hint wins: upstream buckets are coarser than ours
            category=hint or Category.parse(_first_category(record.get("category")), Category.TECHNOLOGY),
            source_id=NEWSDATA_SOURCE_ID,
            source_name=clean_text(record.get("source_name") or record.get("source_id")) or NEWSDATA_SOURCE_NAME,
            creators=_as_string_list(record.get("creator")),
        )

    def from_search_records(
        self,
        records: Sequence[Mapping[str, Any]],
        category_hint: str | None = None,
    ) -> list[Article]:
        return [self.from_search_record(record, category_hint) for record in records]

    # =========================================================================
    # RSS
    # =========================================================================

    def from_rss_item(self, item: RSSItem) -> Article:
        description = item.description or item.summary
        return Article(
            id=stored_article_id(item.link) if item.link else generate_article_id(RSS_SOURCE_ID),
            title=item.title or DEFAULT_TITLE,
            description=clean_text(description),
            content=clean_text(item.content),
            link=item.link,
            image_url=item.image_url,
            published_at=item.published_at or utc_now(),
            category=item.category,
            source_id=RSS_SOURCE_ID,
            source_name=item.feed_name,
            creators=list(item.creators),
        )

    def to_stored(self, article: Article, feed_id: str) -> StoredRSSArticle:
        """Shape an RSS-derived article for the article store."""
        return StoredRSSArticle(
            id=article.id,
            feed_id=feed_id,
            title=article.title,
            link=article.link,
            published_at=article.published_at,
            category=article.category,
            description=article.description,
            content=article.content,
            image_url=article.image_url,
            creators=list(article.creators),
        )

    def from_stored(
        self,
        stored: Sequence[StoredRSSArticle],
        feeds: Mapping[str, FeedSource],
        category_hint: str | None = None,
    ) -> list[Article]:
        """
        Normalize stored feed articles.

        ``feeds`` maps feed id to FeedSource and supplies the source name.
        A stored article's own category takes precedence over the hint.
        """
        hint = Category.parse(category_hint)
        articles = []
        for item in stored:
            feed = feeds.get(item.feed_id)
            articles.append(
                Article(
                    id=item.id or generate_article_id(RSS_SOURCE_ID),
                    title=item.title or DEFAULT_TITLE,
                    description=clean_text(item.description),
                    content=clean_text(item.content),
                    link=item.link or "",
                    image_url=item.image_url or None,
                    published_at=parse_datetime(item.published_at) or utc_now(),
                    category=item.category or hint or Category.TECHNOLOGY,
                    source_id=RSS_SOURCE_ID,
                    source_name=feed.name if feed else "",
                    creators=list(item.creators),
                )
            )
        return articles

    # =========================================================================
    # Post-processing
    # =========================================================================

    async def dereference(self, articles: list[Article]) -> list[Article]:
        """
        Replace aggregator redirect links with their targets, in place.

        No-op without a resolver. Failures keep the original link.
        """
        if self._resolver is None:
            return articles
        pending = [a for a in articles if a.link and is_blocked_host(a.link, self._aggregator_domains)]
        if not pending:
            return articles

        resolved = await gather_with_errors(
            *(self._resolver.resolve(a.link) for a in pending),
            return_exceptions=True,
        )
        for article, result in zip(pending, resolved, strict=True):
            if isinstance(result, str) and result:
                article.link = result
        logger.debug(f"Dereferenced {len(pending)} aggregator links")
        return articles

    @staticmethod
    def deduplicate(articles: Iterable[Article]) -> list[Article]:
        """Drop later articles sharing a non-empty link or title with an earlier one."""
        seen_links: set[str] = set()
        seen_titles: set[str] = set()
        unique: list[Article] = []
        for article in articles:
            link = article.link.strip()
            title = article.title.strip().lower()
            if (link and link in seen_links) or (title and title in seen_titles):
                continue
            if link:
                seen_links.add(link)
            if title:
                seen_titles.add(title)
            unique.append(article)
        return unique
