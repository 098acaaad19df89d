"""FastAPI dependencies that hand the app's store to route handlers."""

from fastapi import Depends, Header, HTTPException, Request

from prism.config import Settings
from prism.services.catalog import (
    BookmarkRepository,
    CategoryRepository,
    SourceRepository,
)
from prism.services.repository import ArticleRepository
from prism.services.store import NewsStore


def get_store(request: Request) -> NewsStore:
    return request.app.state.store


def get_articles(request: Request) -> ArticleRepository:
    return get_store(request).articles


def get_categories(request: Request) -> CategoryRepository:
    return get_store(request).categories


def get_sources(request: Request) -> SourceRepository:
    return get_store(request).sources


def get_bookmarks(request: Request) -> BookmarkRepository:
    return get_store(request).bookmarks


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_ingest_key(
    x_ingest_key: str = Header(),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Reject the request unless it carries the configured ingest key."""
    if not settings.ingest_api_key or x_ingest_key != settings.ingest_api_key:
        raise HTTPException(status_code=403, detail="Invalid ingest key")
