"""
HTTP API Server for the news aggregation pipeline.

Endpoints:
    GET    /news                  merged API + store listing
    GET    /news/rss              store-only listing
    GET    /news/check-updates    cache metadata snapshot (no upstream call)
    GET    /news/{article_id}     single article
    POST   /news                  405, news is read-only
    PUT    /news/{article_id}     405
    DELETE /news/{article_id}     405
    GET    /health

Upstream failures never surface as 5xx: they come back as HTTP 200 with
empty results, a classified ``message`` and ``errorType``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from news_aggregator.application.news import NewsRequest, NewsResponse, NewsService, classify_error, log_degraded
from news_aggregator.container import ApplicationContainer, close_resources, create_container
from news_aggregator.shared.exceptions import NewsAggregatorError, NotFoundError, UnsupportedOperationError
from news_aggregator.shared.settings import Settings

logger = logging.getLogger(__name__)


# Pydantic models for API responses
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ArticleModel(CamelModel):
    """Normalized article."""

    id: str
    title: str
    description: str = ""
    content: str = ""
    link: str = ""
    image_url: str | None = None
    published_at: datetime
    category: str
    source_id: str
    source_name: str = ""
    creators: list[str] = []
    relevance_score: float | None = None
    popularity_score: float | None = None


class PaginationModel(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class NewsListResponse(CamelModel):
    """Listing response, also used for degraded (classified error) results."""

    status: str = "success"
    results: list[ArticleModel]
    total_results: int
    next_page: str | None = None
    pagination: PaginationModel
    message: str | None = None
    error_type: str | None = None


class LatestArticleModel(CamelModel):
    id: str
    title: str
    link: str
    source_name: str
    published_at: datetime


class UpdateCheckResponse(CamelModel):
    """Cache metadata snapshot; the ``since`` fields are null without ``since``."""

    article_count: int
    next_page: str | None = None
    last_refreshed_at: datetime | None = None
    new_articles_count: int | None = None
    has_updates: bool | None = None
    latest_articles: list[LatestArticleModel] | None = None


class HealthResponse(CamelModel):
    """Health check response."""

    status: str
    stored_articles: int
    last_refreshed_at: datetime | None = None
    prefetch_running: bool = False
    recent_articles: int = 0
    recent_cache_hit_rate: float = 0.0


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str


# =============================================================================
# Application factory
# =============================================================================


def get_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def get_news_service(container: ApplicationContainer = Depends(get_container)) -> NewsService:
    return container.news_service()


def create_app(
    container: ApplicationContainer | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        container: Pre-configured container (tests override providers on it)
        settings: Used to build a container when none is given; defaults to
            the environment

    Returns:
        Configured FastAPI instance
    """
    container = container or create_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the prefetch job with the app, stop it and close clients on shutdown."""
        job = container.prefetch_job()
        if container.config.prefetch_enabled():
            job.start()
        else:
            logger.info("Prefetch job disabled")
        logger.info("News API server initialized")

        yield

        logger.info("News API server shutting down")
        await job.stop()
        await close_resources(container)

    app = FastAPI(
        title="News Aggregator API",
        description="Merged, ranked news from a news search API and RSS/Atom feeds.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    _register_routes(app)
    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(UnsupportedOperationError)
    async def unsupported_handler(request: Request, exc: UnsupportedOperationError) -> JSONResponse:
        return JSONResponse(status_code=405, content={"detail": str(exc)})

    @app.exception_handler(NewsAggregatorError)
    async def degraded_handler(request: Request, exc: NewsAggregatorError) -> JSONResponse:
        classified = classify_error(exc)
        log_degraded(request.url.path, exc, classified)
        return JSONResponse(status_code=200, content=NewsResponse.degraded(classified).to_dict())


def _register_routes(app: FastAPI) -> None:
    @app.get("/health", response_model=HealthResponse)
    async def health_check(container: ApplicationContainer = Depends(get_container)) -> dict[str, Any]:
        """Health check endpoint."""
        service = container.news_service()
        metadata = container.metadata_store().snapshot()
        recent = container.recent_articles()
        return {
            "status": "healthy",
            "storedArticles": await service.stored_article_count(),
            "lastRefreshedAt": metadata.last_refreshed_at,
            "prefetchRunning": container.prefetch_job().running,
            "recentArticles": len(recent),
            "recentCacheHitRate": recent.stats.hit_rate,
        }

    @app.get("/news", response_model=NewsListResponse)
    async def list_news(
        page: int = Query(default=1, description="Page of the local store half (1-based)"),
        limit: int = Query(default=10, description="Page size, clamped to 1..100"),
        q: str | None = Query(default=None, description="Free-text search"),
        category: str | None = Query(default=None),
        date_from: str | None = Query(default=None, alias="from", description="YYYY-MM-DD"),
        date_to: str | None = Query(default=None, alias="to", description="YYYY-MM-DD"),
        language: str | None = Query(default=None),
        source: str | None = Query(default=None, description="Source name substring"),
        sort: str | None = Query(default=None, description="relevance | date | popularity"),
        next_page: str | None = Query(default=None, alias="nextPage", description="Upstream continuation token"),
        service: NewsService = Depends(get_news_service),
    ) -> dict[str, Any]:
        """
        Merged listing: one upstream batch (selected by ``nextPage``) plus
        page ``page`` of the local store, deduplicated and ranked.
        """
        response = await service.get_news(
            NewsRequest(
                page=page,
                limit=limit,
                q=q,
                category=category,
                date_from=date_from,
                date_to=date_to,
                language=language,
                source=source,
                sort=sort,
                next_page=next_page,
            )
        )
        return response.to_dict()

    @app.get("/news/rss", response_model=NewsListResponse)
    async def list_rss_news(
        page: int = Query(default=1),
        limit: int = Query(default=10),
        q: str | None = Query(default=None),
        category: str | None = Query(default=None),
        service: NewsService = Depends(get_news_service),
    ) -> dict[str, Any]:
        """Local store only, independently paginated."""
        response = await service.get_rss_news(page=page, limit=limit, q=q, category=category)
        return response.to_dict()

    @app.get("/news/check-updates", response_model=UpdateCheckResponse)
    async def check_updates(
        since: str | None = Query(default=None, description="ISO-8601 timestamp"),
        service: NewsService = Depends(get_news_service),
    ) -> dict[str, Any]:
        """Cache metadata snapshot. Never calls the upstream API."""
        return (await service.check_updates(since)).to_dict()

    @app.get(
        "/news/{article_id}",
        response_model=ArticleModel,
        responses={404: {"model": ErrorResponse, "description": "Article not found"}},
    )
    async def get_article(article_id: str, service: NewsService = Depends(get_news_service)) -> dict[str, Any]:
        article = await service.get_article(article_id)
        return article.to_dict()

    @app.post("/news", responses={405: {"model": ErrorResponse}})
    async def create_article(service: NewsService = Depends(get_news_service)) -> None:
        await service.create_article()

    @app.put("/news/{article_id}", responses={405: {"model": ErrorResponse}})
    async def update_article(article_id: str, service: NewsService = Depends(get_news_service)) -> None:
        await service.update_article(article_id)

    @app.delete("/news/{article_id}", responses={405: {"model": ErrorResponse}})
    async def delete_article(article_id: str, service: NewsService = Depends(get_news_service)) -> None:
        await service.delete_article(article_id)


def run_api_server(settings: Settings | None = None) -> None:
    """
    Run the HTTP API server.

    Args:
        settings: Service settings (default: read from the environment)
    """
    import uvicorn

    settings = settings or Settings.from_env()
    logger.info(f"Starting HTTP API server on {settings.host}:{settings.port}")
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port, log_level="info")
