"""Filter pipeline: composable predicates over articles.

Each criterion is optional; an absent criterion adds no predicate. Predicates
combine with AND (tags match internally with OR). Visibility always runs first
for public listings so hidden articles drop out before anything else is checked.
"""

from collections.abc import Callable, Iterable

from prism.models.article import Article, ArticleQuery
from prism.models.category import ALL_CATEGORY_SLUG

Predicate = Callable[[Article], bool]


def is_visible(article: Article) -> bool:
    return not article.is_hidden


def category_filter(category: str) -> Predicate:
    wanted = category.lower()

    def _match(article: Article) -> bool:
        return article.category.lower() == wanted

    return _match


def tags_filter(tags: Iterable[str]) -> Predicate:
    """Pass articles carrying at least one of *tags* (case-insensitive)."""
    wanted = {t.lower() for t in tags}

    def _match(article: Article) -> bool:
        return any(t.lower() in wanted for t in article.tags)

    return _match


def source_filter(source: str) -> Predicate:
    needle = source.lower()

    def _match(article: Article) -> bool:
        return needle in article.source.lower()

    return _match


def focus_filter(lgbtq_focused: bool) -> Predicate:
    def _match(article: Article) -> bool:
        return article.is_lgbtq_focused == lgbtq_focused

    return _match


def build_filters(
    criteria: ArticleQuery | None, include_hidden: bool = False
) -> list[Predicate]:
    """Build the active predicate chain for *criteria*.

    Cheap boolean checks go before string comparisons.
    """
    predicates: list[Predicate] = []
    if not include_hidden:
        predicates.append(is_visible)
    if criteria is None:
        return predicates

    if criteria.lgbtq_focused is not None:
        predicates.append(focus_filter(criteria.lgbtq_focused))
    if criteria.category and criteria.category.lower() != ALL_CATEGORY_SLUG:
        predicates.append(category_filter(criteria.category))
    if criteria.source:
        predicates.append(source_filter(criteria.source))
    if criteria.tags:
        predicates.append(tags_filter(criteria.tags))
    return predicates


def apply_filters(
    articles: Iterable[Article],
    criteria: ArticleQuery | None = None,
    include_hidden: bool = False,
) -> list[Article]:
    """Return the articles that pass every active predicate, order preserved."""
    predicates = build_filters(criteria, include_hidden=include_hidden)
    return [a for a in articles if all(p(a) for p in predicates)]
