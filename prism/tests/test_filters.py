"""Tests for the filter pipeline."""

from datetime import datetime, timezone

from prism.models.article import Article, ArticleQuery
from prism.services.filters import apply_filters, build_filters

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


def _make_article(article_id: str, **overrides) -> Article:
    data = {
        "id": article_id,
        "title": f"Article {article_id}",
        "excerpt": "",
        "content": "",
        "url": f"https://test.com/{article_id}",
        "category": "news",
        "tags": [],
        "author": "Staff",
        "source": "Test Source",
        "source_type": "rss",
        "published_at": NOW,
        "created_at": NOW,
    }
    data.update(overrides)
    return Article(**data)


def _ids(articles: list[Article]) -> list[str]:
    return [a.id for a in articles]


ARTICLES = [
    _make_article("pol", category="Politics", tags=["Vote", "Senate"], source="The Advocate"),
    _make_article("cul", category="culture", tags=["Film"], source="Out Magazine", is_lgbtq_focused=True),
    _make_article("hea", category="health", tags=["Youth", "Film"], source="Queerty", is_lgbtq_focused=True),
    _make_article("hid", category="politics", tags=["Vote"], source="The Advocate", is_hidden=True),
]


def test_no_criteria_passes_everything_visible():
    assert _ids(apply_filters(ARTICLES)) == ["pol", "cul", "hea"]
    assert _ids(apply_filters(ARTICLES, ArticleQuery())) == ["pol", "cul", "hea"]


def test_hidden_always_excluded_for_public_listing():
    criteria = ArticleQuery(category="politics", tags=["Vote"])
    assert _ids(apply_filters(ARTICLES, criteria)) == ["pol"]


def test_include_hidden_for_admin():
    assert "hid" in _ids(apply_filters(ARTICLES, include_hidden=True))


def test_category_is_case_insensitive_exact():
    assert _ids(apply_filters(ARTICLES, ArticleQuery(category="POLITICS"))) == ["pol"]
    # exact, not substring
    assert apply_filters(ARTICLES, ArticleQuery(category="pol")) == []


def test_category_all_disables_filter():
    assert _ids(apply_filters(ARTICLES, ArticleQuery(category="all"))) == ["pol", "cul", "hea"]
    assert _ids(apply_filters(ARTICLES, ArticleQuery(category="All"))) == ["pol", "cul", "hea"]


def test_tags_match_any():
    criteria = ArticleQuery(tags=["Senate", "Youth"])
    assert _ids(apply_filters(ARTICLES, criteria)) == ["pol", "hea"]


def test_tags_are_case_insensitive():
    assert _ids(apply_filters(ARTICLES, ArticleQuery(tags=["film"]))) == ["cul", "hea"]


def test_empty_tag_list_is_no_constraint():
    assert len(apply_filters(ARTICLES, ArticleQuery(tags=[]))) == 3


def test_source_substring():
    assert _ids(apply_filters(ARTICLES, ArticleQuery(source="advo"))) == ["pol"]
    assert _ids(apply_filters(ARTICLES, ArticleQuery(source="MAGAZINE"))) == ["cul"]


def test_focus_flag_exact_match():
    assert _ids(apply_filters(ARTICLES, ArticleQuery(lgbtq_focused=True))) == ["cul", "hea"]
    assert _ids(apply_filters(ARTICLES, ArticleQuery(lgbtq_focused=False))) == ["pol"]


def test_filters_combine_with_and():
    criteria = ArticleQuery(tags=["Film"], lgbtq_focused=True, category="health")
    assert _ids(apply_filters(ARTICLES, criteria)) == ["hea"]


def test_build_filters_counts_active_predicates():
    assert len(build_filters(None)) == 1  # visibility only
    assert len(build_filters(None, include_hidden=True)) == 0
    criteria = ArticleQuery(category="all", source="x", lgbtq_focused=False)
    assert len(build_filters(criteria)) == 3
