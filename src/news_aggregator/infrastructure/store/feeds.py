"""
Feed catalogue loader.

The catalogue is a YAML document with a top-level ``feeds`` list:

    feeds:
      - name: "Krebs on Security"
        url: "https://krebsonsecurity.com/feed/"
        category: Cybersecurity
        active: true
"""

from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path
from typing import Any

import yaml

from news_aggregator.domain.entities import Category, FeedSource
from news_aggregator.shared.exceptions import ConfigurationError, ErrorContext

logger = logging.getLogger(__name__)

_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def feed_id_for(name: str, url: str) -> str:
    """Stable feed id: slugified name plus a short hash of the URL."""
    slug = _SLUG_CHARS.sub("-", name.lower()).strip("-") or "feed"
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:6]
    return f"{slug}-{digest}"


def parse_feed_entry(raw: dict[str, Any]) -> FeedSource:
    """Build a ``FeedSource`` from one catalogue mapping."""
    name = str(raw.get("name") or "").strip()
    url = str(raw.get("url") or "").strip()
    if not name or not url:
        msg = f"Feed entry needs both 'name' and 'url': {raw!r}"
        raise ValueError(msg)
    category = Category.parse(raw.get("category"))
    if category is None:
        msg = f"Feed '{name}' has unknown category {raw.get('category')!r}"
        raise ValueError(msg)
    return FeedSource(
        id=str(raw.get("id") or feed_id_for(name, url)),
        name=name,
        url=url,
        category=category,
        is_active=bool(raw.get("active", True)),
    )


def load_feeds_yaml(path: str | Path) -> list[FeedSource]:
    """
    Load the feed catalogue.

    Duplicate URLs keep their first entry.

    Raises:
        ConfigurationError: File missing, not YAML, or an entry is invalid
    """
    path = Path(path)
    try:
        raw_data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(
            f"Feed catalogue not readable: {path}",
            context=ErrorContext(input_value=str(path), suggestion="Check NEWS_FEEDS_FILE"),
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Feed catalogue is not valid YAML: {path}",
            context=ErrorContext(input_value=str(path)),
        ) from e

    entries = raw_data.get("feeds") if isinstance(raw_data, dict) else raw_data
    if not isinstance(entries, list):
        raise ConfigurationError(
            f"Feed catalogue {path} must contain a 'feeds' list",
            context=ErrorContext(input_value=str(path)),
        )

    feeds: list[FeedSource] = []
    seen_urls: set[str] = set()
    for raw in entries:
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Feed catalogue entry is not a mapping: {raw!r}")
        try:
            feed = parse_feed_entry(raw)
        except ValueError as e:
            raise ConfigurationError(str(e), context=ErrorContext(input_value=str(path))) from e
        if feed.url in seen_urls:
            logger.warning(f"Duplicate feed URL ignored: {feed.url}")
            continue
        seen_urls.add(feed.url)
        feeds.append(feed)

    logger.info(f"Loaded {len(feeds)} feeds from {path} ({sum(f.is_active for f in feeds)} active)")
    return feeds
