"""Shared fixtures for prism tests."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset module-level singletons and caches between tests."""
    yield

    # 1. Settings LRU cache
    from prism.config import get_settings

    get_settings.cache_clear()

    # 2. HTTP client singleton
    import prism.services.http_client as http_mod

    http_mod._client = None


@pytest.fixture
def test_settings():
    """Settings with safe test defaults: seeded catalog, no network, no scheduler."""
    from prism.config import Settings

    return Settings(
        load_seed_data=True,
        load_sample_articles=False,
        news_api_key="",
        ingest_api_key="test-ingest-key",
        scheduler_enabled=False,
        search_mode="fuzzy",
        search_threshold=0.3,
    )


@pytest.fixture
def store(test_settings):
    """A fresh store with the default categories and RSS sources."""
    from prism.services.store import NewsStore

    return NewsStore.from_settings(test_settings)


@pytest.fixture
def repo():
    """An empty article repository with default search settings."""
    from prism.services.repository import ArticleRepository

    return ArticleRepository()


@pytest.fixture
def make_payload():
    """Factory for valid article payload dicts with unique URLs."""
    counter = {"n": 0}
    now = datetime.now(timezone.utc)

    def _make(title: str = "Test Article", hours_ago: float = 0, **overrides) -> dict:
        counter["n"] += 1
        payload = {
            "title": title,
            "excerpt": "A short excerpt.",
            "content": "Body text for the article.",
            "url": f"https://example.com/article-{counter['n']}",
            "category": "news",
            "tags": [],
            "author": "Staff Writer",
            "source": "Example News",
            "source_type": "rss",
            "published_at": now - timedelta(hours=hours_ago),
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
async def client(test_settings, store):
    """HTTP client bound to an app that uses the ``store`` fixture."""
    from prism.main import create_app

    app = create_app(settings=test_settings, store=store)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as c:
        yield c
