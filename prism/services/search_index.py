"""Weighted multi-field fuzzy search over articles.

Each article field is split into word tokens. A query term is compared with
every token in the index vocabulary once per query using ``difflib`` ratios:
an identical token is a perfect hit, a token that contains the term is a
partial hit, and anything else scores by edit similarity. A field's distance is
the mean over query terms of ``1 - best similarity``; the field matches when
that distance is within the threshold. Where in the field the token sits does
not matter.

The index is rebuilt from scratch, and its owner decides when: the article
repository marks it stale on every mutation and rebuilds on the next query, so
a batch of writes costs one rebuild. An incremental index would be a different
design.
"""

import logging
import re
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from difflib import SequenceMatcher

from prism.models.article import Article, TagCount

logger = logging.getLogger(__name__)

# Title matches matter most, category least
FIELD_WEIGHTS: dict[str, float] = {
    "title": 0.4,
    "excerpt": 0.3,
    "content": 0.2,
    "tags": 0.1,
    "author": 0.05,
    "category": 0.05,
}

DEFAULT_THRESHOLD = 0.3
DEFAULT_MIN_MATCH_CHAR_LENGTH = 2

# Similarity credited when a token contains the query term (e.g. "equal" in "equality")
PARTIAL_MATCH_SIMILARITY = 0.9

# Title words shorter than this are too generic to suggest
MIN_SUGGESTION_WORD_LENGTH = 4

_TOKEN_RE = re.compile(r"\w+")


@dataclass
class SearchResult:
    """An article with its relevance score (0 = perfect, 1 = no match)."""

    article: Article
    score: float


@dataclass
class _IndexedArticle:
    article: Article
    fields: dict[str, frozenset[str]]


class ArticleSearchIndex:
    """Fuzzy search, trending tags, and suggestions over an article snapshot.

    Usage::

        index = ArticleSearchIndex(articles, threshold=0.3)
        for result in index.search_with_scores("marrige equality"):
            print(result.article.title, result.score)
    """

    def __init__(
        self,
        articles: Iterable[Article] = (),
        threshold: float = DEFAULT_THRESHOLD,
        min_match_char_length: int = DEFAULT_MIN_MATCH_CHAR_LENGTH,
        weights: Mapping[str, float] | None = None,
    ) -> None:
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {threshold}")
        self._threshold = threshold
        self._min_length = max(1, min_match_char_length)
        self._weights = dict(weights or FIELD_WEIGHTS)
        self._total_weight = sum(self._weights.values()) or 1.0
        self._articles: list[Article] = []
        self._entries: list[_IndexedArticle] = []
        self._vocabulary: frozenset[str] = frozenset()
        self._stale = True
        self.rebuild(articles)

    def __len__(self) -> int:
        return len(self._articles)

    @property
    def articles(self) -> list[Article]:
        return list(self._articles)

    @property
    def is_stale(self) -> bool:
        return self._stale

    def mark_stale(self) -> None:
        """Flag that the underlying article set changed since the last rebuild."""
        self._stale = True

    def rebuild(self, articles: Iterable[Article]) -> None:
        """Re-tokenize every article. Not incremental."""
        self._articles = list(articles)
        entries: list[_IndexedArticle] = []
        vocabulary: set[str] = set()
        for article in self._articles:
            fields = {
                name: frozenset(self._tokenize(_field_text(article, name)))
                for name in self._weights
            }
            for tokens in fields.values():
                vocabulary.update(tokens)
            entries.append(_IndexedArticle(article=article, fields=fields))
        self._entries = entries
        self._vocabulary = frozenset(vocabulary)
        self._stale = False
        logger.debug(
            "Search index rebuilt: %d articles, %d distinct tokens",
            len(entries),
            len(vocabulary),
        )

    def search(self, query: str, limit: int | None = None) -> list[Article]:
        """Articles ordered by relevance; the whole set for a blank query."""
        return [r.article for r in self.search_with_scores(query, limit)]

    def search_with_scores(
        self, query: str, limit: int | None = None
    ) -> list[SearchResult]:
        """Scored matches, best first. A blank query scores everything 0.

        A *limit* of None or below 1 returns every match.
        """
        if limit is not None and limit < 1:
            limit = None
        if not query or not query.strip():
            articles = self._articles if limit is None else self._articles[:limit]
            return [SearchResult(article=a, score=0.0) for a in articles]

        terms = list(dict.fromkeys(self._tokenize(query)))
        if not terms:
            return []

        similarities = [self._term_similarities(term) for term in terms]
        results: list[SearchResult] = []
        for entry in self._entries:
            score = self._score(entry, similarities)
            if score is not None:
                results.append(SearchResult(article=entry.article, score=score))

        # Stable: equal scores keep index order
        results.sort(key=lambda r: r.score)
        return results if limit is None else results[:limit]

    def trending_tags(self, limit: int = 10) -> list[TagCount]:
        """Most frequent tags, ties broken by first appearance."""
        if limit <= 0:
            return []
        counts: Counter[str] = Counter()
        for article in self._articles:
            counts.update(article.tags)
        return [TagCount(tag=tag, count=n) for tag, n in counts.most_common(limit)]

    def suggestions(self, prefix: str, limit: int = 5) -> list[str]:
        """Distinct title words, tags, and categories starting with *prefix*."""
        needle = prefix.strip().lower() if prefix else ""
        if not needle or limit <= 0:
            return []

        seen: set[str] = set()
        found: list[str] = []

        def _offer(term: str) -> bool:
            key = term.lower()
            if key.startswith(needle) and key not in seen:
                seen.add(key)
                found.append(term)
            return len(found) >= limit

        for article in self._articles:
            for word in _TOKEN_RE.findall(article.title.lower()):
                if len(word) >= MIN_SUGGESTION_WORD_LENGTH and _offer(word):
                    return found
            for tag in article.tags:
                if _offer(tag):
                    return found
            if article.category and _offer(article.category):
                return found
        return found

    def _tokenize(self, text: str) -> list[str]:
        return [t for t in _TOKEN_RE.findall(text.lower()) if len(t) >= self._min_length]

    def _term_similarities(self, term: str) -> dict[str, float]:
        """Similarity of *term* to each vocabulary token that could match."""
        cutoff = 1.0 - self._threshold
        matcher = SequenceMatcher()
        matcher.set_seq2(term)
        sims: dict[str, float] = {}
        for token in self._vocabulary:
            if token == term:
                sims[token] = 1.0
            elif term in token:
                sims[token] = PARTIAL_MATCH_SIMILARITY
            else:
                matcher.set_seq1(token)
                if (
                    matcher.real_quick_ratio() >= cutoff
                    and matcher.quick_ratio() >= cutoff
                ):
                    ratio = matcher.ratio()
                    if ratio >= cutoff:
                        sims[token] = ratio
        return sims

    def _score(
        self, entry: _IndexedArticle, similarities: list[dict[str, float]]
    ) -> float | None:
        """Weighted relevance for one article, or None when no field matches."""
        earned = 0.0
        for name, weight in self._weights.items():
            tokens = entry.fields.get(name)
            if not tokens:
                continue
            distance = sum(
                1.0 - max((sims[t] for t in tokens if t in sims), default=0.0)
                for sims in similarities
            ) / len(similarities)
            if distance <= self._threshold:
                earned += weight * (1.0 - distance)
        if earned == 0.0:
            return None
        return round(1.0 - earned / self._total_weight, 6)


def _field_text(article: Article, name: str) -> str:
    value = getattr(article, name, "")
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value or "")
