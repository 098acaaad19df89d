"""NewsAPI ingestion: keyword searches against the ``everything`` endpoint."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from prism.config import Settings
from prism.models.article import ArticleCreate, SourceType
from prism.services.http_client import get_shared_client
from prism.services.ingestion.classify import category_from_text, is_lgbtq_focused

logger = logging.getLogger(__name__)

# One request per query; keep the list short to stay inside the free tier
SEARCH_QUERIES = ("LGBTQ", "LGBT", "gay rights", "transgender", "pride")

PAGE_SIZE = 20

# Delay between queries to respect rate limits
INTER_QUERY_DELAY = 1.0

REMOVED_MARKER = "[Removed]"


def _parse_timestamp(value: str | None) -> datetime:
    if value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable NewsAPI timestamp: %s", value)
    return datetime.now(timezone.utc)


def parse_newsapi_item(item: dict[str, Any], keyword: str) -> ArticleCreate | None:
    """Convert one NewsAPI result into an article payload, or None to drop it."""
    title = (item.get("title") or "").strip()
    url = item.get("url")
    if not title or not url or title == REMOVED_MARKER:
        return None

    description = item.get("description") or ""
    source_name = (item.get("source") or {}).get("name") or "NewsAPI"
    return ArticleCreate(
        title=title,
        excerpt=description,
        content=item.get("content") or description,
        url=url,
        image_url=item.get("urlToImage") or None,
        category=category_from_text(title, description),
        tags=[keyword],
        author=item.get("author") or source_name,
        source=source_name,
        source_type=SourceType.API,
        published_at=_parse_timestamp(item.get("publishedAt")),
        is_lgbtq_focused=is_lgbtq_focused(title, description),
    )


async def fetch_newsapi_articles(
    settings: Settings, queries: tuple[str, ...] = SEARCH_QUERIES
) -> list[ArticleCreate]:
    """Run each keyword query and collect unique article payloads.

    Returns [] without an API key. Failed queries are logged and skipped.
    """
    if not settings.news_api_key:
        logger.warning("NewsAPI key not configured, skipping NewsAPI fetch")
        return []

    client = get_shared_client()
    articles: list[ArticleCreate] = []
    seen_urls: set[str] = set()

    for i, keyword in enumerate(queries):
        if i > 0:
            await asyncio.sleep(INTER_QUERY_DELAY)
        try:
            resp = await client.get(
                f"{settings.news_api_url}/everything",
                params={
                    "q": f'"{keyword}"',
                    "language": "en",
                    "sortBy": "publishedAt",
                    "pageSize": str(PAGE_SIZE),
                },
                headers={"X-Api-Key": settings.news_api_key},
            )
        except httpx.HTTPError as e:
            logger.error("NewsAPI request failed for %r: %s", keyword, e)
            continue
        if resp.status_code != 200:
            logger.warning("NewsAPI %d for query %r", resp.status_code, keyword)
            continue

        try:
            payload = resp.json()
        except ValueError as e:
            logger.error("NewsAPI returned invalid JSON for %r: %s", keyword, e)
            continue
        items = payload.get("articles") if isinstance(payload, dict) else None

        for item in items or []:
            if not isinstance(item, dict):
                continue
            try:
                article = parse_newsapi_item(item, keyword)
            except (PydanticValidationError, AttributeError, TypeError) as e:
                logger.warning("Skipping malformed NewsAPI item for %r: %s", keyword, e)
                continue
            if article is not None and article.url not in seen_urls:
                seen_urls.add(article.url)
                articles.append(article)

    logger.info("Fetched %d articles from NewsAPI", len(articles))
    return articles
