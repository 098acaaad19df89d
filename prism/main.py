"""
Prism News API

FastAPI backend serving the aggregated, ranked news feed.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from prism.config import Settings, get_settings
from prism.errors import StoreError
from prism.middleware import RequestIDMiddleware, configure_logging
from prism.routers import admin, articles, bookmarks, categories, sources
from prism.services.http_client import close_shared_client
from prism.services.ingestion.scheduler import IngestionScheduler
from prism.services.store import NewsStore

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: start background ingestion, tear down the store."""
    settings: Settings = app.state.settings
    scheduler: IngestionScheduler | None = None
    if settings.scheduler_enabled:
        scheduler = IngestionScheduler(app.state.store, settings)
        scheduler.start()
    logger.info(
        "Prism API started (%s, %d articles)",
        settings.environment,
        app.state.store.articles.count(),
    )
    yield
    if scheduler is not None:
        await scheduler.stop()
    await close_shared_client()
    app.state.store.close()


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app(
    settings: Settings | None = None, store: NewsStore | None = None
) -> FastAPI:
    """Build the app around one store; tests pass their own."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Prism News API",
        description="Aggregated LGBTQ+ news with search, filtering and editorial ranking",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store if store is not None else NewsStore.from_settings(settings)

    # Request ID
    app.add_middleware(RequestIDMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StoreError, _store_error_handler)

    # Routers
    app.include_router(articles.router, prefix=API_PREFIX)
    app.include_router(categories.router, prefix=API_PREFIX)
    app.include_router(sources.router, prefix=API_PREFIX)
    app.include_router(bookmarks.router, prefix=API_PREFIX)
    app.include_router(admin.router, prefix=API_PREFIX)

    @app.get(f"{API_PREFIX}/health")
    async def health_check() -> dict:
        """Liveness plus a few store counters."""
        store: NewsStore = app.state.store
        return {
            "status": "ok",
            "service": "prism-api",
            "version": "0.1.0",
            "articles": store.articles.count(),
            "search_index_stale": store.articles.index_stale,
        }

    return app


app = create_app()
