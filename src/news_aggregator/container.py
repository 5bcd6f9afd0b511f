"""
Application DI Container (dependency-injector).

Builds the whole pipeline once per process: one adapter object per upstream,
each owning its HTTP client, passed by reference to the services that use
it.

Usage::

    from news_aggregator.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict(Settings.from_env().as_container_config())

    service = container.news_service()
    job = container.prefetch_job()

    # In tests, override any provider:
    container.newsdata_client.override(providers.Object(mock_client))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

from news_aggregator.application.news import (
    ArticleNormalizer,
    FeedRefresher,
    NewsService,
    PrefetchJob,
    QueryEngine,
)
from news_aggregator.infrastructure.cache import CacheMetadataStore, RecentArticleCache
from news_aggregator.infrastructure.sources import LinkResolver, NewsDataClient, RSSAdapter
from news_aggregator.infrastructure.store import InMemoryRSSArticleStore, load_feeds_yaml
from news_aggregator.shared.settings import Settings

logger = logging.getLogger(__name__)


def _create_link_resolver(enabled: bool, timeout: float) -> LinkResolver | None:
    """Network redirect resolution is opt-in."""
    if not enabled:
        return None
    return LinkResolver(timeout=timeout)


def _create_article_store(feeds_file: str | None) -> InMemoryRSSArticleStore:
    feeds = load_feeds_yaml(feeds_file) if feeds_file else []
    return InMemoryRSSArticleStore(feeds=feeds)


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the News Aggregator.

    Manages creation and lifecycle of all core services:
    - ``newsdata_client`` / ``rss_adapter`` / ``link_resolver``: upstream adapters
    - ``article_store``: RSS article store seeded from the feed catalogue
    - ``news_service``: request-path aggregation
    - ``prefetch_job``: background refresh
    """

    config = providers.Configuration()

    link_resolver = providers.Singleton(
        _create_link_resolver,
        enabled=config.resolve_redirects,
        timeout=config.redirect_timeout,
    )

    newsdata_client = providers.Singleton(
        NewsDataClient,
        api_key=config.api_key,
        base_url=config.base_url,
        timeout=config.api_timeout,
    )

    rss_adapter = providers.Singleton(
        RSSAdapter,
        timeout=config.feed_timeout,
        aggregator_domains=config.aggregator_domains,
        resolver=link_resolver,
    )

    article_store = providers.Singleton(
        _create_article_store,
        feeds_file=config.feeds_file,
    )

    recent_articles = providers.Singleton(RecentArticleCache)

    metadata_store = providers.Singleton(CacheMetadataStore)

    normalizer = providers.Singleton(
        ArticleNormalizer,
        resolver=link_resolver,
        aggregator_domains=config.aggregator_domains,
    )

    query_engine = providers.Singleton(
        QueryEngine,
        store=article_store,
        normalizer=normalizer,
    )

    news_service = providers.Singleton(
        NewsService,
        client=newsdata_client,
        store=article_store,
        normalizer=normalizer,
        query_engine=query_engine,
        recent_articles=recent_articles,
        metadata=metadata_store,
        language=config.language,
    )

    feed_refresher = providers.Singleton(
        FeedRefresher,
        adapter=rss_adapter,
        store=article_store,
        normalizer=normalizer,
    )

    prefetch_job = providers.Singleton(
        PrefetchJob,
        refresher=feed_refresher,
        client=newsdata_client,
        normalizer=normalizer,
        store=article_store,
        recent_articles=recent_articles,
        metadata=metadata_store,
        interval=config.prefetch_interval,
        page_size=config.prefetch_page_size,
        language=config.language,
    )


def create_container(settings: Settings | None = None) -> ApplicationContainer:
    """Container configured from ``settings`` (default: the environment)."""
    settings = settings or Settings.from_env()
    container = ApplicationContainer()
    container.config.from_dict(settings.as_container_config())
    return container


async def close_resources(container: ApplicationContainer) -> None:
    """Close the HTTP clients owned by the adapters."""
    await container.newsdata_client().close()
    await container.rss_adapter().close()
    resolver = container.link_resolver()
    if resolver is not None:
        await resolver.close()
    logger.debug("Upstream HTTP clients closed")


__all__ = ["ApplicationContainer", "close_resources", "create_container"]
