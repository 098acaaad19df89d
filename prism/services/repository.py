"""In-memory article repository, the query surface behind the feed.

Every list-producing path runs the same pipeline: optional text narrowing,
filter pipeline, ranking policy, then the pagination window. Hidden articles
stay in the store and remain reachable by id, but never reach a public listing.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Literal, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from prism.errors import DuplicateError, NotFoundError, ValidationError
from prism.models.article import (
    SEARCH_VECTOR_FIELDS,
    Article,
    ArticleCreate,
    ArticlePage,
    ArticleQuery,
    ArticleUpdate,
    TagCount,
)
from prism.services.filters import apply_filters
from prism.services.ranking import rank_articles
from prism.services.search_index import (
    DEFAULT_MIN_MATCH_CHAR_LENGTH,
    DEFAULT_THRESHOLD,
    ArticleSearchIndex,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

SearchMode = Literal["fuzzy", "substring"]

DEFAULT_RANK_SCORE = 100


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_payload(model: type[ModelT], data: ModelT | Mapping[str, Any]) -> ModelT:
    """Coerce *data* into *model*, reporting bad input as ``ValidationError``."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {model.__name__}: {e}") from e


def build_search_vector(article: ArticleCreate) -> str:
    """Lowercase concatenation of every searchable field."""
    parts: list[str] = []
    for name in SEARCH_VECTOR_FIELDS:
        value = getattr(article, name)
        parts.append(" ".join(value) if isinstance(value, list) else str(value))
    return " ".join(parts).lower()


class ArticleRepository:
    """Authoritative article store with ranked list/search queries.

    All reads and writes run under *lock*; pass the store-wide lock so that
    articles, categories, sources and bookmarks share one exclusion domain.
    """

    def __init__(
        self,
        lock: threading.RLock | None = None,
        *,
        search_mode: SearchMode = "fuzzy",
        search_threshold: float = DEFAULT_THRESHOLD,
        min_match_char_length: int = DEFAULT_MIN_MATCH_CHAR_LENGTH,
        default_rank_score: int = DEFAULT_RANK_SCORE,
    ) -> None:
        self._lock = lock or threading.RLock()
        self._search_mode = search_mode
        self._default_rank_score = default_rank_score
        # dict preserves insertion order, which is the ranking tie-break
        self._articles: dict[str, Article] = {}
        self._ids_by_url: dict[str, str] = {}
        self._index = ArticleSearchIndex(
            threshold=search_threshold,
            min_match_char_length=min_match_char_length,
        )

    def __len__(self) -> int:
        return self.count()

    def count(self) -> int:
        with self._lock:
            return len(self._articles)

    @property
    def search_index(self) -> ArticleSearchIndex:
        """Fuzzy index over visible articles, rebuilt on access when stale."""
        with self._lock:
            if self._index.is_stale:
                self._rebuild_index()
            return self._index

    @property
    def index_stale(self) -> bool:
        """True when a mutation happened since the index was last rebuilt."""
        with self._lock:
            return self._index.is_stale

    # -- point operations ---------------------------------------------------

    def create(self, data: ArticleCreate | Mapping[str, Any]) -> Article:
        """Insert a new article.

        Raises:
            ValidationError: If a required field is missing or malformed.
            DuplicateError: If an article with the same URL already exists.
        """
        payload = validate_payload(ArticleCreate, data)
        with self._lock:
            if payload.url in self._ids_by_url:
                raise DuplicateError("Article", "url", payload.url)
            article = Article(
                **payload.model_dump(),
                id=str(uuid.uuid4()),
                created_at=utcnow(),
            )
            article.search_vector = build_search_vector(article)
            self._articles[article.id] = article
            self._ids_by_url[article.url] = article.id
            self._index.mark_stale()
        logger.debug("Created article %s: %s", article.id, article.title[:60])
        return article

    def get(self, article_id: str) -> Article:
        """Look up an article by id, hidden or not."""
        with self._lock:
            article = self._articles.get(article_id)
        if article is None:
            raise NotFoundError("Article", article_id)
        return article

    def get_by_url(self, url: str) -> Article | None:
        with self._lock:
            article_id = self._ids_by_url.get(url)
            return self._articles.get(article_id) if article_id else None

    def update(
        self, article_id: str, changes: ArticleUpdate | Mapping[str, Any]
    ) -> Article:
        """Merge *changes* over the stored article and return the result."""
        partial = validate_payload(ArticleUpdate, changes)
        fields = partial.model_dump(exclude_unset=True)
        with self._lock:
            current = self._require(article_id)
            new_url = fields.get("url")
            if new_url and new_url != current.url:
                owner = self._ids_by_url.get(new_url)
                if owner is not None and owner != article_id:
                    raise DuplicateError("Article", "url", new_url)

            merged = validate_payload(Article, {**current.model_dump(), **fields})
            if any(name in fields for name in SEARCH_VECTOR_FIELDS):
                merged.search_vector = build_search_vector(merged)

            if merged.url != current.url:
                del self._ids_by_url[current.url]
                self._ids_by_url[merged.url] = article_id
            self._articles[article_id] = merged
            self._index.mark_stale()
        logger.info("Updated article %s (%s)", article_id, ", ".join(sorted(fields)))
        return merged

    def delete(self, article_id: str) -> None:
        """Remove an article permanently."""
        with self._lock:
            article = self._require(article_id)
            del self._articles[article_id]
            self._ids_by_url.pop(article.url, None)
            self._index.mark_stale()
        logger.info("Deleted article %s: %s", article_id, article.title[:60])

    def like(self, article_id: str) -> Article:
        """Add one like. Repeat likes from the same reader are not deduplicated."""
        with self._lock:
            current = self._require(article_id)
            return self._replace(current, likes=current.likes + 1)

    def promote(self, article_id: str, rank_score: int | None = None) -> Article:
        """Pin an article above chronological order with the given rank score."""
        score = self._default_rank_score if rank_score is None else rank_score
        if score < 0:
            raise ValidationError(f"rank_score must be >= 0, got {score}")
        with self._lock:
            current = self._require(article_id)
            article = self._replace(
                current, is_promoted=True, rank_score=score, promoted_at=utcnow()
            )
        logger.info("Promoted article %s with rank %d", article_id, score)
        return article

    def unpromote(self, article_id: str) -> Article:
        """Return an article to chronological order. Safe to repeat."""
        with self._lock:
            current = self._require(article_id)
            article = self._replace(
                current, is_promoted=False, rank_score=0, promoted_at=None
            )
        logger.info("Unpromoted article %s", article_id)
        return article

    def hide(self, article_id: str) -> Article:
        with self._lock:
            current = self._require(article_id)
            article = self._replace(current, is_hidden=True, hidden_at=utcnow())
            self._index.mark_stale()
        logger.info("Hid article %s", article_id)
        return article

    def unhide(self, article_id: str) -> Article:
        with self._lock:
            current = self._require(article_id)
            article = self._replace(current, is_hidden=False, hidden_at=None)
            self._index.mark_stale()
        logger.info("Unhid article %s", article_id)
        return article

    # -- listings -----------------------------------------------------------

    def list(self, criteria: ArticleQuery | None = None) -> ArticlePage:
        """Filter, rank, and paginate the visible articles."""
        criteria = criteria or ArticleQuery()
        with self._lock:
            candidates = list(self._articles.values())
        return self._assemble(candidates, criteria)

    def search(
        self, query: str | None, criteria: ArticleQuery | None = None
    ) -> ArticlePage:
        """Narrow by free text, then filter, rank, and paginate.

        A blank query is the same as ``list``.
        """
        criteria = criteria or ArticleQuery()
        text = (query or "").strip()
        if not text:
            return self.list(criteria)

        with self._lock:
            if self._search_mode == "substring":
                candidates = self._substring_matches(text)
            else:
                # Index snapshots can lag likes/promotions; map back to live records
                candidates = [
                    self._articles[r.article.id]
                    for r in self.search_index.search_with_scores(text)
                    if r.article.id in self._articles
                ]
        return self._assemble(candidates, criteria)

    def list_all(self, include_hidden: bool = False) -> list[Article]:
        """Ranked dump of the store for administrative callers."""
        with self._lock:
            articles = list(self._articles.values())
        if not include_hidden:
            articles = [a for a in articles if not a.is_hidden]
        return rank_articles(articles)

    def trending_tags(self, limit: int = 10) -> list[TagCount]:
        with self._lock:
            return self.search_index.trending_tags(limit)

    def suggestions(self, prefix: str, limit: int = 5) -> list[str]:
        with self._lock:
            return self.search_index.suggestions(prefix, limit)

    def clear(self) -> None:
        with self._lock:
            self._articles.clear()
            self._ids_by_url.clear()
            self._index.mark_stale()

    # -- internals ----------------------------------------------------------

    def _require(self, article_id: str) -> Article:
        article = self._articles.get(article_id)
        if article is None:
            raise NotFoundError("Article", article_id)
        return article

    def _replace(self, current: Article, **changes: Any) -> Article:
        article = current.model_copy(update=changes)
        self._articles[current.id] = article
        return article

    def _rebuild_index(self) -> None:
        self._index.rebuild(a for a in self._articles.values() if not a.is_hidden)

    def _substring_matches(self, text: str) -> list[Article]:
        terms = text.lower().split()
        return [
            a
            for a in self._articles.values()
            if all(term in a.search_vector for term in terms)
        ]

    @staticmethod
    def _assemble(candidates: list[Article], criteria: ArticleQuery) -> ArticlePage:
        ranked = rank_articles(apply_filters(candidates, criteria))
        start = criteria.offset
        return ArticlePage(
            articles=ranked[start : start + criteria.limit],
            total=len(ranked),
            limit=criteria.limit,
            offset=criteria.offset,
        )
