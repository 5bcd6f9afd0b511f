"""
RSS/Atom Feed Adapter

Fetches configured feeds over HTTP and parses them with feedparser into
source-native ``RSSItem`` records.

Per item:
- ``content``: content:encoded > summary > description
- ``summary``: plain text of ``content``, truncated to 500 characters
- ``image_url``: enclosure > media:content > inline ``<img>`` > media:thumbnail
- ``link``: when missing or on an aggregator redirect domain, the first real
  article URL embedded in content/description; otherwise kept as is

Failure policy:
- A malformed entry is logged and skipped
- A feed that cannot be fetched or parsed raises ``FeedFetchError``
- ``fetch_all`` never raises for a single feed; that feed yields no items
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import feedparser
import httpx

from news_aggregator.domain.entities import Category, FeedSource
from news_aggregator.infrastructure.sources.extraction import (
    extract_article_url,
    extract_image_url,
    is_blocked_host,
    strip_html,
    truncate,
)
from news_aggregator.infrastructure.sources.link_resolver import LinkResolver
from news_aggregator.shared.async_utils import gather_with_errors
from news_aggregator.shared.dates import parse_datetime
from news_aggregator.shared.exceptions import FeedFetchError
from news_aggregator.shared.settings import DEFAULT_AGGREGATOR_DOMAINS

logger = logging.getLogger(__name__)

DEFAULT_FEED_TIMEOUT = 10.0


@dataclass
class RSSItem:
    """One feed entry, before normalization."""

    feed_id: str
    feed_name: str
    category: Category
    title: str = ""
    link: str = ""
    content: str = ""
    summary: str = ""
    description: str = ""
    image_url: str | None = None
    published_at: datetime | None = None
    creators: list[str] = field(default_factory=list)
    guid: str | None = None


class RSSAdapter:
    """
    Feed fetcher and parser.

    One instance per process; it owns its ``httpx.AsyncClient``.

    Usage:
        adapter = RSSAdapter(timeout=10.0)
        items = await adapter.fetch_all(feeds)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_FEED_TIMEOUT,
        aggregator_domains: Iterable[str] = DEFAULT_AGGREGATOR_DOMAINS,
        resolver: LinkResolver | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._aggregator_domains = tuple(d.lower() for d in aggregator_domains)
        self._resolver = resolver
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={
                "User-Agent": "Mozilla/5.0 (compatible; NewsAggregator/1.0)",
                "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml",
            },
        )

    @property
    def aggregator_domains(self) -> tuple[str, ...]:
        return self._aggregator_domains

    async def fetch_feed(self, feed: FeedSource) -> list[RSSItem]:
        """
        Fetch and parse one feed.

        Raises:
            FeedFetchError: HTTP/network failure or unparseable document
        """
        try:
            response = await self._client.get(feed.url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise FeedFetchError(feed.url, f"timed out after {self._timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise FeedFetchError(feed.url, f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise FeedFetchError(feed.url, str(e) or type(e).__name__) from e

        items = self.parse_feed(response.content, feed)
        if self._resolver is not None:
            await self._resolve_links(items)
        logger.info(f"Parsed {len(items)} items from {feed.name}")
        return items

    async def _resolve_links(self, items: list[RSSItem]) -> None:
        """Dereference remaining aggregator links concurrently, in place."""
        pending = [i for i in items if i.link and is_blocked_host(i.link, self._aggregator_domains)]
        if not pending or self._resolver is None:
            return
        resolved = await gather_with_errors(
            *(self._resolver.resolve(item.link) for item in pending),
            return_exceptions=True,
        )
        for item, result in zip(pending, resolved, strict=True):
            if isinstance(result, str) and result:
                item.link = result

    def parse_feed(self, document: bytes | str, feed: FeedSource) -> list[RSSItem]:
        """
        Parse a feed document into items.

        Raises:
            FeedFetchError: No recognisable feed format and no entries
        """
        parsed = feedparser.parse(document)
        entries = parsed.get("entries") or []

        if not entries and (parsed.get("bozo") or not parsed.get("version")):
            reason = parsed.get("bozo_exception") or "unrecognised feed format"
            raise FeedFetchError(feed.url, str(reason))

        items: list[RSSItem] = []
        for entry in entries:
            try:
                items.append(self.parse_entry(entry, feed))
            except Exception as e:
                logger.warning(f"Skipping malformed entry in {feed.name}: {e}")
                continue
        return items

    def parse_entry(self, entry: Mapping[str, Any], feed: FeedSource) -> RSSItem:
        """Map one feedparser entry to an ``RSSItem``."""
        description = str(entry.get("description") or "")
        content = self._entry_content(entry) or description
        summary_text = strip_html(content)

        link = str(entry.get("link") or "").strip()
        if not link or is_blocked_host(link, self._aggregator_domains):
            embedded = extract_article_url(content, self._aggregator_domains) or extract_article_url(
                description, self._aggregator_domains
            )
            if embedded:
                link = embedded

        return RSSItem(
            feed_id=feed.id,
            feed_name=feed.name,
            category=feed.category,
            title=strip_html(entry.get("title")),
            link=link,
            content=content,
            summary=truncate(summary_text),
            description=strip_html(description),
            image_url=extract_image_url(entry, content),
            published_at=self._entry_date(entry),
            creators=self._entry_creators(entry),
            guid=entry.get("id") or None,
        )

    @staticmethod
    def _entry_content(entry: Mapping[str, Any]) -> str:
        # content:encoded arrives as entry.content[0].value
        for block in entry.get("content") or []:
            value = block.get("value") if isinstance(block, Mapping) else None
            if value:
                return str(value)
        return str(entry.get("summary") or "")

    @staticmethod
    def _entry_date(entry: Mapping[str, Any]) -> datetime | None:
        for key in ("published", "updated", "created"):
            dt = parse_datetime(entry.get(key))
            if dt is not None:
                return dt
        for key in ("published_parsed", "updated_parsed"):
            dt = parse_datetime(entry.get(key))
            if dt is not None:
                return dt
        return None

    @staticmethod
    def _entry_creators(entry: Mapping[str, Any]) -> list[str]:
        creators: list[str] = []
        for author in entry.get("authors") or []:
            name = author.get("name") if isinstance(author, Mapping) else None
            if name and name not in creators:
                creators.append(str(name))
        if not creators and entry.get("author"):
            creators.append(str(entry["author"]))
        return creators

    async def fetch_all(self, feeds: Iterable[FeedSource]) -> list[RSSItem]:
        """Fetch feeds concurrently. Failing feeds are logged and contribute nothing."""
        feed_list = [feed for feed in feeds if feed.is_active]
        if not feed_list:
            return []

        results = await gather_with_errors(
            *(self.fetch_feed(feed) for feed in feed_list),
            return_exceptions=True,
        )

        items: list[RSSItem] = []
        failed = 0
        for feed, result in zip(feed_list, results, strict=True):
            if isinstance(result, FeedFetchError):
                logger.warning(f"Feed {feed.name} skipped: {result}")
                failed += 1
            elif isinstance(result, BaseException):
                logger.error(f"Unexpected error fetching {feed.name}: {result}")
                failed += 1
            else:
                items.extend(result)

        logger.info(f"Fetched {len(items)} items from {len(feed_list) - failed}/{len(feed_list)} feeds")
        return items

    async def close(self) -> None:
        await self._client.aclose()
