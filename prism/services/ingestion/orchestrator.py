"""Ingestion orchestrator: fetch RSS and NewsAPI, then feed the repository."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from prism.config import Settings
from prism.errors import DuplicateError, NotFoundError, ValidationError
from prism.models.article import ArticleCreate
from prism.services.ingestion.newsapi import fetch_newsapi_articles
from prism.services.ingestion.rss import fetch_source
from prism.services.repository import ArticleRepository
from prism.services.store import NewsStore

logger = logging.getLogger(__name__)


@dataclass
class IngestionStats:
    """Stats from an ingestion run."""

    sources: int = 0
    fetched: int = 0
    new: int = 0
    skipped: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {
            "sources": self.sources,
            "fetched": self.fetched,
            "new": self.new,
            "skipped": self.skipped,
            "failed": self.failed,
        }


def save_articles(
    repository: ArticleRepository, candidates: Iterable[ArticleCreate]
) -> IngestionStats:
    """Create each candidate; URLs already stored count as skipped."""
    stats = IngestionStats()
    for candidate in candidates:
        stats.fetched += 1
        try:
            repository.create(candidate)
            stats.new += 1
        except DuplicateError:
            stats.skipped += 1
        except ValidationError as e:
            stats.failed += 1
            logger.error("Rejected article '%s': %s", candidate.title[:60], e)
    return stats


async def run_ingestion(store: NewsStore, settings: Settings) -> IngestionStats:
    """Run a full ingestion cycle over active RSS sources and NewsAPI."""
    logger.info("Starting ingestion run")
    sources = store.sources.list_active()
    results = await asyncio.gather(
        *[fetch_source(source) for source in sources],
        return_exceptions=True,
    )

    candidates: list[ArticleCreate] = []
    for source, result in zip(sources, results):
        if isinstance(result, BaseException):
            logger.error("Unexpected error fetching %s: %s", source.name, result)
            continue
        candidates.extend(result)
        try:
            store.sources.mark_fetched(source.id)
        except NotFoundError:
            logger.info("Source %s was removed during ingestion", source.name)

    try:
        candidates.extend(await fetch_newsapi_articles(settings))
    except Exception:
        # RSS candidates already fetched are still saved
        logger.exception("NewsAPI fetch failed")

    stats = save_articles(store.articles, candidates)
    stats.sources = len(sources)

    logger.info(
        "Ingestion complete: %d fetched, %d new, %d skipped, %d failed",
        stats.fetched,
        stats.new,
        stats.skipped,
        stats.failed,
    )
    return stats


async def refresh_source(store: NewsStore, source_id: str) -> IngestionStats:
    """Fetch a single RSS source on demand.

    Raises:
        NotFoundError: If the source id is unknown.
    """
    source = store.sources.get(source_id)
    candidates = await fetch_source(source)
    store.sources.mark_fetched(source.id)
    stats = save_articles(store.articles, candidates)
    stats.sources = 1
    logger.info("Refreshed %s: %d new articles", source.name, stats.new)
    return stats
