"""Tests for the ingestion orchestrator: dedup, source bookkeeping and failures."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import httpx
import pytest

from prism.errors import NotFoundError
from prism.models.article import ArticleCreate, SourceType
from prism.services.ingestion.orchestrator import (
    IngestionStats,
    refresh_source,
    run_ingestion,
    save_articles,
)
from prism.services.ingestion.scheduler import IngestionScheduler


def _make_candidate(slug, title="Test Article", source="Test"):
    return ArticleCreate(
        title=title,
        excerpt="A test article summary for testing purposes",
        content="Full text of the test article",
        url=f"https://test.com/{slug}",
        category="news",
        tags=["Pride"],
        author="Staff",
        source=source,
        source_type=SourceType.RSS,
        published_at=datetime.now(timezone.utc),
    )


def _mock_fetchers(mocker, rss=None, newsapi=None):
    """Patch both fetchers; *rss* maps source name -> candidates (or an exception)."""
    rss = rss or {}

    async def fake_fetch_source(source):
        result = rss.get(source.name, [])
        if isinstance(result, Exception):
            raise result
        return result

    fetch_source = mocker.patch(
        "prism.services.ingestion.orchestrator.fetch_source",
        side_effect=fake_fetch_source,
    )
    fetch_newsapi = mocker.patch(
        "prism.services.ingestion.orchestrator.fetch_newsapi_articles",
        new_callable=AsyncMock,
        return_value=newsapi or [],
    )
    return fetch_source, fetch_newsapi


def test_save_articles_counts(repo):
    repo.create(_make_candidate("existing"))
    stats = save_articles(
        repo,
        [_make_candidate("existing"), _make_candidate("new-1"), _make_candidate("new-2")],
    )

    assert stats.fetched == 3
    assert stats.new == 2
    assert stats.skipped == 1
    assert stats.failed == 0
    assert len(repo) == 3


def test_save_articles_same_url_twice_in_batch(repo):
    stats = save_articles(repo, [_make_candidate("dup"), _make_candidate("dup")])

    assert stats.new == 1
    assert stats.skipped == 1


def test_stats_to_dict():
    stats = IngestionStats(sources=2, fetched=5, new=3, skipped=2)
    assert stats.to_dict() == {
        "sources": 2,
        "fetched": 5,
        "new": 3,
        "skipped": 2,
        "failed": 0,
    }


async def test_run_ingestion_saves_rss_and_newsapi(mocker, store, test_settings):
    fetch_source, fetch_newsapi = _mock_fetchers(
        mocker,
        rss={
            "Queerty": [_make_candidate("q-1", source="Queerty")],
            "The Advocate": [_make_candidate("a-1", source="The Advocate")],
        },
        newsapi=[_make_candidate("n-1", source="Reuters")],
    )

    stats = await run_ingestion(store, test_settings)

    assert stats.sources == 4
    assert stats.new == 3
    assert fetch_source.call_count == 4
    fetch_newsapi.assert_awaited_once_with(test_settings)
    assert {a.source for a in store.articles.list().articles} == {
        "Queerty",
        "The Advocate",
        "Reuters",
    }


async def test_run_ingestion_skips_known_urls(mocker, store, test_settings):
    store.articles.create(_make_candidate("q-1"))
    _mock_fetchers(mocker, rss={"Queerty": [_make_candidate("q-1")]})

    stats = await run_ingestion(store, test_settings)

    assert stats.new == 0
    assert stats.skipped == 1
    assert len(store.articles) == 1


async def test_run_ingestion_marks_sources_fetched(mocker, store, test_settings):
    _mock_fetchers(mocker)

    await run_ingestion(store, test_settings)

    assert all(s.last_fetched is not None for s in store.sources.list())


async def test_run_ingestion_only_active_sources(mocker, store, test_settings):
    queerty = next(s for s in store.sources.list() if s.name == "Queerty")
    store.sources.update(queerty.id, {"is_active": False})
    fetch_source, _ = _mock_fetchers(mocker)

    stats = await run_ingestion(store, test_settings)

    assert stats.sources == 3
    fetched_names = {call.args[0].name for call in fetch_source.call_args_list}
    assert "Queerty" not in fetched_names
    assert store.sources.get(queerty.id).last_fetched is None


async def test_one_failing_source_does_not_stop_the_run(mocker, store, test_settings):
    _mock_fetchers(
        mocker,
        rss={
            "Queerty": RuntimeError("boom"),
            "Out Magazine": [_make_candidate("o-1", source="Out Magazine")],
        },
    )

    stats = await run_ingestion(store, test_settings)

    assert stats.new == 1
    queerty = next(s for s in store.sources.list() if s.name == "Queerty")
    assert queerty.last_fetched is None


async def test_refresh_source(mocker, store):
    source = store.sources.list()[0]
    _mock_fetchers(mocker, rss={source.name: [_make_candidate("r-1")]})

    stats = await refresh_source(store, source.id)

    assert stats.sources == 1
    assert stats.new == 1
    assert store.sources.get(source.id).last_fetched is not None


async def test_refresh_unknown_source(store):
    with pytest.raises(NotFoundError):
        await refresh_source(store, "missing")


async def test_scheduler_start_and_stop(mocker, store, test_settings):
    run = mocker.patch(
        "prism.services.ingestion.scheduler.run_ingestion", new_callable=AsyncMock
    )
    scheduler = IngestionScheduler(store, test_settings, initial_delay=0)

    scheduler.start()
    assert scheduler.running
    # let the task reach its first run
    for _ in range(5):
        await asyncio.sleep(0)
    await scheduler.stop()

    assert not scheduler.running
    run.assert_awaited_once_with(store, test_settings)


async def test_bad_newsapi_response_keeps_rss_articles(mocker, store, test_settings):
    """A maintenance page from NewsAPI must not cost the RSS batch."""
    queerty = next(s for s in store.sources.list() if s.name == "Queerty")

    async def fake_fetch_source(source):
        return [_make_candidate("q-1", source="Queerty")] if source.id == queerty.id else []

    mocker.patch(
        "prism.services.ingestion.orchestrator.fetch_source",
        side_effect=fake_fetch_source,
    )
    mocker.patch("prism.services.ingestion.newsapi.asyncio.sleep", new_callable=AsyncMock)
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, text="<html>maintenance</html>")
        )
    )
    mocker.patch("prism.services.ingestion.newsapi.get_shared_client", return_value=client)
    settings = test_settings.model_copy(update={"news_api_key": "secret"})

    stats = await run_ingestion(store, settings)
    await client.aclose()

    assert stats.new == 1
    assert store.articles.get_by_url("https://test.com/q-1") is not None


async def test_newsapi_crash_keeps_rss_articles(mocker, store, test_settings):
    _mock_fetchers(mocker, rss={"Queerty": [_make_candidate("q-1", source="Queerty")]})
    mocker.patch(
        "prism.services.ingestion.orchestrator.fetch_newsapi_articles",
        new_callable=AsyncMock,
        side_effect=RuntimeError("boom"),
    )

    stats = await run_ingestion(store, test_settings)

    assert stats.new == 1
    assert len(store.articles) == 1
