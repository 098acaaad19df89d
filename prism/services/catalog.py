"""Category, RSS source, and bookmark repositories.

Plain keyed collections with uniqueness checks. They share the store-wide lock
with the article repository.
"""

from __future__ import annotations

import logging
import re
import threading
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from prism.errors import DuplicateError, NotFoundError, ValidationError
from prism.models.bookmark import Bookmark, BookmarkCreate
from prism.models.category import (
    ALL_CATEGORY_SLUG,
    Category,
    CategoryCreate,
    CategoryUpdate,
)
from prism.models.source import RssSource, RssSourceCreate, RssSourceUpdate
from prism.services.repository import utcnow, validate_payload

logger = logging.getLogger(__name__)

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Lowercase, hyphen-separated slug: "Culture & Arts" -> "culture-arts"."""
    slug = _NON_SLUG_RE.sub("-", name.lower()).strip("-")
    if not slug:
        raise ValidationError(f"Cannot derive a slug from {name!r}")
    return slug


class CategoryRepository:
    """Categories ordered by ``sort_order``; equal orders keep insertion order."""

    def __init__(self, lock: threading.RLock | None = None) -> None:
        self._lock = lock or threading.RLock()
        self._categories: dict[str, Category] = {}

    def list(self, include_inactive: bool = False) -> list[Category]:
        with self._lock:
            categories = list(self._categories.values())
        if not include_inactive:
            categories = [c for c in categories if c.is_active]
        return sorted(categories, key=lambda c: c.sort_order)

    def get(self, category_id: str) -> Category:
        with self._lock:
            category = self._categories.get(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def find(self, key: str) -> Category | None:
        """Alternate-key lookup: match *key* against slug, then name."""
        wanted = key.strip().lower()
        with self._lock:
            for category in self._categories.values():
                if category.slug == wanted:
                    return category
            for category in self._categories.values():
                if category.name.lower() == wanted:
                    return category
        return None

    def resolve(self, id_or_key: str) -> Category:
        """Look up by id, falling back to slug or name for older clients."""
        with self._lock:
            category = self._categories.get(id_or_key) or self.find(id_or_key)
        if category is None:
            raise NotFoundError("Category", id_or_key)
        return category

    def create(self, data: CategoryCreate | Mapping[str, Any]) -> Category:
        payload = validate_payload(CategoryCreate, data)
        slug = payload.slug or slugify(payload.name)
        with self._lock:
            self._check_unique(payload.name, slug)
            category = Category(
                id=str(uuid.uuid4()),
                name=payload.name,
                slug=slug,
                description=payload.description,
                is_active=payload.is_active,
                sort_order=payload.sort_order,
            )
            self._categories[category.id] = category
        logger.info("Created category %s (%s)", category.name, category.slug)
        return category

    def update(
        self, category_id: str, changes: CategoryUpdate | Mapping[str, Any]
    ) -> Category:
        partial = validate_payload(CategoryUpdate, changes)
        fields = partial.model_dump(exclude_unset=True)
        # Only description may be cleared explicitly
        for name in ("name", "slug", "is_active", "sort_order"):
            if fields.get(name) is None:
                fields.pop(name, None)
        with self._lock:
            current = self._require(category_id)
            new_slug = fields.get("slug", current.slug)
            if current.slug == ALL_CATEGORY_SLUG and new_slug != current.slug:
                raise ValidationError("The 'all' category slug cannot be changed")
            self._check_unique(
                fields.get("name"), fields.get("slug"), exclude_id=category_id
            )
            category = current.model_copy(update=fields)
            self._categories[category_id] = category
        return category

    def delete(self, category_id: str) -> None:
        """Remove a category. The reserved 'all' category cannot be deleted."""
        with self._lock:
            category = self._require(category_id)
            if category.slug == ALL_CATEGORY_SLUG:
                raise ValidationError("The 'all' category cannot be deleted")
            del self._categories[category_id]
        logger.info("Deleted category %s", category.slug)

    def reorder(self, orders: Iterable[tuple[str, int]]) -> list[Category]:
        """Apply ``(id, sort_order)`` pairs atomically; unknown ids abort the batch."""
        orders = list(orders)
        with self._lock:
            for category_id, _ in orders:
                self._require(category_id)
            for category_id, sort_order in orders:
                current = self._categories[category_id]
                self._categories[category_id] = current.model_copy(
                    update={"sort_order": sort_order}
                )
        return self.list(include_inactive=True)

    def clear(self) -> None:
        with self._lock:
            self._categories.clear()

    def _require(self, category_id: str) -> Category:
        category = self._categories.get(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def _check_unique(
        self, name: str | None, slug: str | None, exclude_id: str | None = None
    ) -> None:
        for other in self._categories.values():
            if other.id == exclude_id:
                continue
            if name is not None and other.name.lower() == name.lower():
                raise DuplicateError("Category", "name", name)
            if slug is not None and other.slug == slug:
                raise DuplicateError("Category", "slug", slug)


class SourceRepository:
    """RSS feed sources. Pass-through persistence keyed by id, unique by URL."""

    def __init__(self, lock: threading.RLock | None = None) -> None:
        self._lock = lock or threading.RLock()
        self._sources: dict[str, RssSource] = {}

    def list(self) -> list[RssSource]:
        with self._lock:
            return list(self._sources.values())

    def list_active(self) -> list[RssSource]:
        return [s for s in self.list() if s.is_active]

    def get(self, source_id: str) -> RssSource:
        with self._lock:
            source = self._sources.get(source_id)
        if source is None:
            raise NotFoundError("RSS source", source_id)
        return source

    def create(self, data: RssSourceCreate | Mapping[str, Any]) -> RssSource:
        payload = validate_payload(RssSourceCreate, data)
        with self._lock:
            self._check_url(payload.url)
            source = RssSource(**payload.model_dump(), id=str(uuid.uuid4()))
            self._sources[source.id] = source
        logger.info("Added RSS source %s (%s)", source.name, source.url)
        return source

    def update(
        self, source_id: str, changes: RssSourceUpdate | Mapping[str, Any]
    ) -> RssSource:
        partial = validate_payload(RssSourceUpdate, changes)
        fields = {
            k: v for k, v in partial.model_dump(exclude_unset=True).items() if v is not None
        }
        with self._lock:
            current = self._require(source_id)
            if "url" in fields:
                self._check_url(fields["url"], exclude_id=source_id)
            source = current.model_copy(update=fields)
            self._sources[source_id] = source
        return source

    def delete(self, source_id: str) -> None:
        with self._lock:
            source = self._require(source_id)
            del self._sources[source_id]
        logger.info("Removed RSS source %s", source.name)

    def mark_fetched(self, source_id: str) -> RssSource:
        with self._lock:
            current = self._require(source_id)
            source = current.model_copy(update={"last_fetched": utcnow()})
            self._sources[source_id] = source
        return source

    def clear(self) -> None:
        with self._lock:
            self._sources.clear()

    def _require(self, source_id: str) -> RssSource:
        source = self._sources.get(source_id)
        if source is None:
            raise NotFoundError("RSS source", source_id)
        return source

    def _check_url(self, url: str, exclude_id: str | None = None) -> None:
        for other in self._sources.values():
            if other.id != exclude_id and other.url == url:
                raise DuplicateError("RSS source", "url", url)


class BookmarkRepository:
    """Per-session bookmarks.

    The same (article, session) pair may be bookmarked more than once; callers
    that want one bookmark per pair should check ``list_by_session`` first.
    """

    def __init__(self, lock: threading.RLock | None = None) -> None:
        self._lock = lock or threading.RLock()
        self._bookmarks: dict[str, Bookmark] = {}

    def create(self, data: BookmarkCreate | Mapping[str, Any]) -> Bookmark:
        payload = validate_payload(BookmarkCreate, data)
        bookmark = Bookmark(
            **payload.model_dump(), id=str(uuid.uuid4()), created_at=utcnow()
        )
        with self._lock:
            self._bookmarks[bookmark.id] = bookmark
        return bookmark

    def list_by_session(self, session_id: str) -> list[Bookmark]:
        with self._lock:
            return [b for b in self._bookmarks.values() if b.session_id == session_id]

    def delete(self, article_id: str, session_id: str) -> None:
        """Remove the oldest bookmark for the pair."""
        with self._lock:
            for bookmark in self._bookmarks.values():
                if bookmark.article_id == article_id and bookmark.session_id == session_id:
                    del self._bookmarks[bookmark.id]
                    return
        raise NotFoundError("Bookmark", f"{article_id} ({session_id})")

    def clear(self) -> None:
        with self._lock:
            self._bookmarks.clear()
