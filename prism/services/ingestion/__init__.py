"""Ingestion services for fetching and classifying articles."""

from prism.services.ingestion.classify import (
    category_from_tags,
    category_from_text,
    is_lgbtq_focused,
)
from prism.services.ingestion.newsapi import fetch_newsapi_articles, parse_newsapi_item
from prism.services.ingestion.orchestrator import (
    IngestionStats,
    refresh_source,
    run_ingestion,
    save_articles,
)
from prism.services.ingestion.rss import fetch_feed, fetch_source, parse_feed_entries
from prism.services.ingestion.scheduler import IngestionScheduler

__all__ = [
    "IngestionScheduler",
    "IngestionStats",
    "category_from_tags",
    "category_from_text",
    "fetch_feed",
    "fetch_newsapi_articles",
    "fetch_source",
    "is_lgbtq_focused",
    "parse_feed_entries",
    "parse_newsapi_item",
    "refresh_source",
    "run_ingestion",
    "save_articles",
]
