"""Ranking & sort policy applied to every article listing.

Order: promoted articles first, then higher rank score among promoted, then
most recently published. Python's sort is stable, so articles that tie on all
three keep the order they were handed in (insertion order for the store).
"""

from collections.abc import Iterable

from prism.models.article import Article

# Rank score conventions for promoted articles
URGENT_RANK = 500
HIGH_PRIORITY_RANK = 300
FEATURED_RANK = 100


def sort_key(article: Article) -> tuple[int, int, float]:
    """Ascending sort key implementing the ranking policy."""
    rank = article.rank_score if article.is_promoted else 0
    return (
        0 if article.is_promoted else 1,
        -rank,
        -article.published_at.timestamp(),
    )


def compare_articles(a: Article, b: Article) -> int:
    """Comparator form of ``sort_key``: negative when *a* sorts first."""
    ka, kb = sort_key(a), sort_key(b)
    return (ka > kb) - (ka < kb)


def rank_articles(articles: Iterable[Article]) -> list[Article]:
    """Return a new list ordered by the ranking policy."""
    return sorted(articles, key=sort_key)


def rank_tier(rank_score: int, is_promoted: bool = True) -> str | None:
    """Display tier for a promoted article's rank score."""
    if not is_promoted:
        return None
    if rank_score >= URGENT_RANK:
        return "urgent"
    if rank_score >= HIGH_PRIORITY_RANK:
        return "high"
    if rank_score >= FEATURED_RANK:
        return "featured"
    return "standard"
