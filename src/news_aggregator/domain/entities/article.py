"""
Article - Unified news article model for multi-source aggregation

This module defines the canonical data structure for news items, designed to
normalize the news search API and RSS/Atom feeds into a single format.

Architecture Decision:
    We use dataclasses (as for every domain entity) rather than Pydantic;
    Pydantic is reserved for the HTTP response schemas.

Entities:
    - Article: ephemeral, merged/ranked view of one news item
    - FeedSource: feed configuration owned by the article store
    - StoredRSSArticle: feed item already indexed in the article store
    - CacheMetadata: summary of the last refresh, replaced wholesale

Example:
    >>> article = Article(
    ...     id="rss-3f2a9c01d4e5b6a7",
    ...     title="Kubernetes 1.31 released",
    ...     link="https://kubernetes.io/blog/2024/08/13/kubernetes-v1-31-release/",
    ...     category=Category.DEVOPS,
    ... )
    >>> article.to_dict()["sourceId"]
    'rss'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

DEFAULT_TITLE = "Untitled"


def utc_now() -> datetime:
    """Timezone-aware current time (UTC)."""
    return datetime.now(timezone.utc)


class Category(StrEnum):
    """Fixed category taxonomy shared by feeds and API results."""

    AI = "AI"
    CLOUD = "Cloud"
    DEVOPS = "DevOps"
    PROGRAMMING = "Programming"
    CYBERSECURITY = "Cybersecurity"
    HEALTHCARE_IT = "HealthcareIT"
    TECHNOLOGY = "Technology"
    BUSINESS = "Business"
    SCIENCE = "Science"

    @classmethod
    def parse(cls, value: Any, default: Category | None = None) -> Category | None:
        """
        Match a category name case-insensitively.

        Accepts the internal names plus the upstream API names
        ("technology", "health", ...). Unknown values return ``default``.
        """
        if isinstance(value, Category):
            return value
        if not isinstance(value, str) or not value.strip():
            return default
        key = value.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return _UPSTREAM_ALIASES.get(key, default)


_UPSTREAM_ALIASES: dict[str, Category] = {
    "health": Category.HEALTHCARE_IT,
    "healthcare": Category.HEALTHCARE_IT,
    "software": Category.PROGRAMMING,
    "startups": Category.BUSINESS,
    "gadgets": Category.TECHNOLOGY,
    "tech": Category.TECHNOLOGY,
}

# Internal category (lower-cased) -> upstream search API category.
# Everything technical collapses to "technology"; health, business and
# science keep their own upstream buckets.
UPSTREAM_CATEGORY_MAP: dict[str, str] = {
    "ai": "technology",
    "cloud": "technology",
    "devops": "technology",
    "programming": "technology",
    "cybersecurity": "technology",
    "technology": "technology",
    "software": "technology",
    "gadgets": "technology",
    "healthcareit": "health",
    "business": "business",
    "startups": "business",
    "science": "science",
}


def map_category_to_upstream(category: str | Category | None) -> str | None:
    """Map an internal category to the upstream API's category value."""
    if category is None:
        return None
    key = str(category).strip().lower()
    if not key:
        return None
    return UPSTREAM_CATEGORY_MAP.get(key, key)


@dataclass
class Article:
    """
    Unified news article.

    Never the system of record: rebuilt from source records on every request.
    Scores are filled in by the ranker and are not persisted.
    """

    id: str
    title: str = DEFAULT_TITLE
    description: str = ""
    content: str = ""
    link: str = ""
    image_url: str | None = None
    published_at: datetime = field(default_factory=utc_now)
    category: Category = Category.TECHNOLOGY
    source_id: str = "rss"
    source_name: str = ""
    creators: list[str] = field(default_factory=list)
    relevance_score: float | None = None
    popularity_score: float | None = None

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase JSON shape served by the HTTP API."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "link": self.link,
            "imageUrl": self.image_url,
            "publishedAt": self.published_at.isoformat(),
            "category": self.category.value,
            "sourceId": self.source_id,
            "sourceName": self.source_name,
            "creators": list(self.creators),
            "relevanceScore": self.relevance_score,
            "popularityScore": self.popularity_score,
        }


@dataclass(frozen=True)
class FeedSource:
    """Configured RSS/Atom feed. Read-only to the aggregation pipeline."""

    id: str
    name: str
    url: str
    category: Category
    is_active: bool = True


@dataclass
class StoredRSSArticle:
    """Feed item as indexed by the article store."""

    id: str
    feed_id: str
    title: str
    link: str
    published_at: datetime
    category: Category
    description: str = ""
    content: str = ""
    image_url: str | None = None
    creators: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CacheMetadata:
    """
    Summary of the last refresh.

    Frozen: a new instance replaces the old one on every refresh, so readers
    always see a consistent snapshot.
    """

    article_count: int = 0
    next_page_token: str | None = None
    last_refreshed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "articleCount": self.article_count,
            "nextPage": self.next_page_token,
            "lastRefreshedAt": self.last_refreshed_at.isoformat() if self.last_refreshed_at else None,
        }
