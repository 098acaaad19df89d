"""Tests for the news store: construction, seeding, sample data."""

import pytest

from prism.config import Settings
from prism.services.store import NewsStore


def test_from_settings_seeds_catalog(store):
    slugs = [c.slug for c in store.categories.list()]
    assert slugs == ["all", "politics", "culture", "health", "business", "community"]
    assert len(store.sources.list()) == 4
    assert all(s.is_lgbtq_focused for s in store.sources.list())
    assert len(store.articles) == 0


def test_reseed_skips_existing(store):
    stats = store.seed()
    assert stats.categories == 0
    assert stats.sources == 0
    assert stats.skipped == 10
    assert len(store.categories.list()) == 6


def test_missing_seed_file_raises(tmp_path):
    store = NewsStore.create()
    with pytest.raises(FileNotFoundError):
        store.seed(tmp_path / "nope.yaml")


def test_missing_seed_file_starts_empty(tmp_path):
    settings = Settings(seed_path=str(tmp_path / "nope.yaml"))
    store = NewsStore.from_settings(settings)
    assert store.categories.list() == []


def test_custom_seed_file(tmp_path):
    seed = tmp_path / "seed.yaml"
    seed.write_text(
        "categories:\n"
        "  - name: Sports\n"
        "sources:\n"
        "  - name: Feed\n"
        "    url: https://feed.example/rss\n"
    )
    store = NewsStore.create()
    stats = store.seed(seed)
    assert stats.categories == 1
    assert stats.sources == 1
    assert store.categories.find("sports") is not None


def test_sample_articles(store):
    assert store.load_sample_articles() == 6
    page = store.articles.list()
    assert page.total == 6
    # newest first
    times = [a.published_at for a in page.articles]
    assert times == sorted(times, reverse=True)
    # loading again adds nothing
    assert store.load_sample_articles() == 0


def test_sample_articles_from_settings():
    store = NewsStore.from_settings(Settings(load_sample_articles=True))
    assert len(store.articles) == 6


def test_store_uses_search_settings(make_payload):
    store = NewsStore.create(Settings(search_mode="substring", default_rank_score=250))
    article = store.articles.create(make_payload(title="Marriage news"))
    assert store.articles.search("marrige").total == 0
    assert store.articles.promote(article.id).rank_score == 250


def test_repositories_share_lock(store):
    assert store.articles._lock is store.lock
    assert store.categories._lock is store.lock
    assert store.bookmarks._lock is store.lock


def test_close_clears_everything(store, make_payload):
    store.articles.create(make_payload())
    store.bookmarks.create({"article_id": "x", "session_id": "s"})
    store.close()
    assert len(store.articles) == 0
    assert store.categories.list(include_inactive=True) == []
    assert store.sources.list() == []
    assert store.bookmarks.list_by_session("s") == []
