"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from news_aggregator.application.news import ArticleNormalizer, QueryEngine
from news_aggregator.domain.entities import Article, Category, FeedSource, StoredRSSArticle
from news_aggregator.infrastructure.store import InMemoryRSSArticleStore

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)

# ============================================================
# Feeds & Store
# ============================================================


@pytest.fixture
def feeds() -> list[FeedSource]:
    return [
        FeedSource(id="krebs", name="Krebs on Security", url="https://krebsonsecurity.com/feed/", category=Category.CYBERSECURITY),
        FeedSource(id="k8s", name="Kubernetes", url="https://kubernetes.io/feed.xml", category=Category.DEVOPS),
        FeedSource(id="verge", name="The Verge", url="https://www.theverge.com/rss/index.xml", category=Category.TECHNOLOGY),
        FeedSource(
            id="threatpost",
            name="Threatpost",
            url="https://threatpost.com/feed/",
            category=Category.CYBERSECURITY,
            is_active=False,
        ),
    ]


def make_stored(
    index: int,
    *,
    feed_id: str = "krebs",
    category: Category = Category.CYBERSECURITY,
    title: str | None = None,
    description: str = "",
    published_at: datetime | None = None,
) -> StoredRSSArticle:
    return StoredRSSArticle(
        id=f"rss-{index:04d}",
        feed_id=feed_id,
        title=title or f"Stored article {index}",
        link=f"https://example.com/articles/{index}",
        published_at=published_at or NOW - timedelta(hours=index),
        category=category,
        description=description or f"Description of article {index}",
        content=f"Body of article {index}",
    )


@pytest.fixture
def stored_articles() -> list[StoredRSSArticle]:
    """25 security articles one hour apart, plus 5 DevOps and 5 Verge ones."""
    articles = [make_stored(i) for i in range(25)]
    articles += [make_stored(100 + i, feed_id="k8s", category=Category.DEVOPS) for i in range(5)]
    articles += [make_stored(200 + i, feed_id="verge", category=Category.TECHNOLOGY) for i in range(5)]
    return articles


@pytest.fixture
def store(feeds, stored_articles) -> InMemoryRSSArticleStore:
    return InMemoryRSSArticleStore(feeds=feeds, articles=stored_articles)


@pytest.fixture
def normalizer() -> ArticleNormalizer:
    return ArticleNormalizer()


@pytest.fixture
def query_engine(store, normalizer) -> QueryEngine:
    return QueryEngine(store, normalizer)


# ============================================================
# Articles
# ============================================================


@pytest.fixture
def make_article() -> Callable[..., Article]:
    def _make(article_id: str = "a-1", **kwargs: Any) -> Article:
        kwargs.setdefault("published_at", NOW)
        return Article(id=article_id, **kwargs)

    return _make


# ============================================================
# Mock NewsData.io Responses
# ============================================================


@pytest.fixture
def newsdata_record() -> dict[str, Any]:
    return {
        "article_id": "a1b2c3d4e5f6",
        "title": "Ransomware gang targets hospitals",
        "link": "https://www.bleepingcomputer.com/news/security/ransomware-hospitals/",
        "creator": ["Jane Doe"],
        "description": "<p>A new ransomware campaign hits <b>healthcare</b>.</p>",
        "content": "ONLY AVAILABLE IN PAID PLANS",
        "pubDate": "2024-06-15 09:30:00",
        "image_url": "https://www.bleepingcomputer.com/images/hospital.jpg",
        "source_id": "bleepingcomputer",
        "source_name": "BleepingComputer",
        "category": ["technology"],
        "language": "english",
    }


@pytest.fixture
def newsdata_payload(newsdata_record) -> dict[str, Any]:
    return {
        "status": "success",
        "totalResults": 42,
        "results": [newsdata_record],
        "nextPage": "1718444400123456789",
    }


# ============================================================
# Feed Documents
# ============================================================


RSS_DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example Security Feed</title>
    <link>https://security.example.com/</link>
    <description>Security news</description>
    <item>
      <title>Patch Tuesday fixes zero-day</title>
      <link>https://security.example.com/patch-tuesday</link>
      <description>Microsoft fixed an actively exploited flaw.</description>
      <content:encoded><![CDATA[<p>Microsoft fixed an <b>actively exploited</b> flaw.</p>]]></content:encoded>
      <enclosure url="https://security.example.com/img/patch.png" type="image/png" length="1234"/>
      <pubDate>Sat, 15 Jun 2024 08:00:00 GMT</pubDate>
      <dc:creator>Brian Krebs</dc:creator>
      <guid>https://security.example.com/?p=1</guid>
    </item>
    <item>
      <title>Google News relay item</title>
      <link>https://news.google.com/rss/articles/CBMiK2h0dHBzOi8vZXhhbXBsZQ</link>
      <description><![CDATA[<img src="http://x.com/a.jpg">Read more at http://real-article.example.com/a]]></description>
      <pubDate>Fri, 14 Jun 2024 10:00:00 EST</pubDate>
    </item>
    <item>
      <title>Thumbnail only</title>
      <link>https://security.example.com/thumbs</link>
      <description>No inline image here.</description>
      <media:thumbnail url="https://security.example.com/img/thumb.jpg"/>
    </item>
  </channel>
</rss>
"""

ATOM_DOCUMENT = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Kubernetes Blog</title>
  <link href="https://kubernetes.io/blog/"/>
  <updated>2024-06-14T00:00:00Z</updated>
  <id>https://kubernetes.io/blog/</id>
  <entry>
    <title>Kubernetes v1.31 released</title>
    <link href="https://kubernetes.io/blog/2024/08/13/kubernetes-v1-31-release/"/>
    <id>https://kubernetes.io/blog/2024/08/13/kubernetes-v1-31-release/</id>
    <updated>2024-06-14T12:00:00Z</updated>
    <author><name>Release Team</name></author>
    <summary>Elli is here.</summary>
  </entry>
</feed>
"""

MALFORMED_DOCUMENT = "<html><body><h1>502 Bad Gateway</h1><p>nginx</p>"


@pytest.fixture
def rss_document() -> str:
    return RSS_DOCUMENT


@pytest.fixture
def atom_document() -> str:
    return ATOM_DOCUMENT


@pytest.fixture
def malformed_document() -> str:
    return MALFORMED_DOCUMENT
