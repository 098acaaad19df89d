"""News store: owns every repository and the lock they share.

One store is constructed per application (see ``prism.main.create_app``) and
handed to whatever needs it. There is no module-level instance.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

import yaml

from prism.config import Settings
from prism.errors import DuplicateError, ValidationError
from prism.services.catalog import (
    BookmarkRepository,
    CategoryRepository,
    SourceRepository,
)
from prism.services.repository import ArticleRepository, utcnow

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).parent.parent.parent / "config"
DEFAULT_SEED_PATH = DEFAULT_CONFIG_DIR / "seed.yaml"
DEFAULT_SAMPLE_PATH = DEFAULT_CONFIG_DIR / "sample_articles.yaml"


@dataclass
class SeedStats:
    """Counts from loading a seed file."""

    categories: int = 0
    sources: int = 0
    skipped: int = 0


@dataclass
class NewsStore:
    """All in-memory collections behind a single mutual-exclusion domain."""

    articles: ArticleRepository
    categories: CategoryRepository
    sources: SourceRepository
    bookmarks: BookmarkRepository
    lock: threading.RLock = field(repr=False)

    @classmethod
    def create(cls, settings: Settings | None = None) -> "NewsStore":
        """Build an empty store configured from *settings*."""
        lock = threading.RLock()
        article_opts = {}
        if settings is not None:
            article_opts = {
                "search_mode": settings.search_mode,
                "search_threshold": settings.search_threshold,
                "min_match_char_length": settings.search_min_match_length,
                "default_rank_score": settings.default_rank_score,
            }
        return cls(
            articles=ArticleRepository(lock, **article_opts),
            categories=CategoryRepository(lock),
            sources=SourceRepository(lock),
            bookmarks=BookmarkRepository(lock),
            lock=lock,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "NewsStore":
        """Build a store and load the seed file when configured to."""
        store = cls.create(settings)
        if settings.load_seed_data:
            try:
                store.seed(settings.seed_path)
            except FileNotFoundError as e:
                logger.warning("Seed file not found, starting empty: %s", e)
        if settings.load_sample_articles:
            store.load_sample_articles()
        return store

    def seed(self, path: str | Path | None = None) -> SeedStats:
        """Load default categories and RSS sources from YAML.

        Entries that already exist (same name/slug/url) are skipped, so
        seeding twice is harmless.

        Raises:
            FileNotFoundError: If the seed file doesn't exist.
            yaml.YAMLError: If the YAML is malformed.
        """
        seed_path = Path(path) if path else DEFAULT_SEED_PATH
        with open(seed_path) as f:
            data = yaml.safe_load(f) or {}

        stats = SeedStats()
        for entry in data.get("categories", []):
            try:
                self.categories.create(entry)
                stats.categories += 1
            except (DuplicateError, ValidationError) as e:
                stats.skipped += 1
                logger.debug("Seed category skipped: %s", e)
        for entry in data.get("sources", []):
            try:
                self.sources.create(entry)
                stats.sources += 1
            except (DuplicateError, ValidationError) as e:
                stats.skipped += 1
                logger.debug("Seed source skipped: %s", e)

        logger.info(
            "Seeded %d categories and %d sources from %s (%d skipped)",
            stats.categories,
            stats.sources,
            seed_path,
            stats.skipped,
        )
        return stats

    def load_sample_articles(self, path: str | Path | None = None) -> int:
        """Load demo articles, dated relative to now. Returns how many were new."""
        sample_path = Path(path) if path else DEFAULT_SAMPLE_PATH
        with open(sample_path) as f:
            data = yaml.safe_load(f) or {}

        now = utcnow()
        created = 0
        for entry in data.get("articles", []):
            entry = dict(entry)
            hours_ago = entry.pop("hours_ago", 0)
            entry.setdefault("published_at", now - timedelta(hours=hours_ago))
            try:
                self.articles.create(entry)
                created += 1
            except DuplicateError:
                continue
            except ValidationError as e:
                logger.error("Invalid sample article in %s: %s", sample_path, e)

        logger.info("Loaded %d sample articles from %s", created, sample_path)
        return created

    def close(self) -> None:
        """Drop all in-memory state at shutdown."""
        with self.lock:
            self.articles.clear()
            self.categories.clear()
            self.sources.clear()
            self.bookmarks.clear()
        logger.info("News store closed")
