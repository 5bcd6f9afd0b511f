"""
Cache metadata holder.

The only shared mutable record on the request path. It is replaced
wholesale; a reader holding an old snapshot keeps a consistent view.
"""

from __future__ import annotations

import logging

from news_aggregator.domain.entities import CacheMetadata

logger = logging.getLogger(__name__)


class CacheMetadataStore:
    """Last-writer-wins holder for ``CacheMetadata``."""

    def __init__(self, initial: CacheMetadata | None = None) -> None:
        self._current = initial or CacheMetadata()

    def snapshot(self) -> CacheMetadata:
        return self._current

    def publish(self, metadata: CacheMetadata) -> None:
        self._current = metadata
        logger.debug(
            f"Cache metadata published: {metadata.article_count} articles, "
            f"nextPage={'set' if metadata.next_page_token else 'none'}"
        )
