"""RSS feed ingestion: fetch feeds and turn entries into article payloads."""

import html
import logging
import re
from datetime import datetime, timezone

import feedparser
import httpx

from prism.models.article import ArticleCreate, SourceType
from prism.models.source import RssSource
from prism.services.http_client import get_shared_client
from prism.services.ingestion.classify import category_from_tags, is_lgbtq_focused

logger = logging.getLogger(__name__)

# Default timeout for HTTP requests
REQUEST_TIMEOUT = 30.0

# Maximum length for excerpts before truncation
MAX_EXCERPT_LENGTH = 300

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def clean_html(text: str) -> str:
    """Strip tags and entities down to plain text.

    Not a sanitizer; output is only ever rendered as text.
    """
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text)
    return _WS_RE.sub(" ", text).strip()


def _truncate(text: str, limit: int = MAX_EXCERPT_LENGTH) -> str:
    if len(text) > limit:
        return text[: limit - 3].rstrip() + "..."
    return text


def _parse_published_date(entry: feedparser.FeedParserDict) -> datetime:
    """Parse the published date from a feed entry.

    Handles both RSS 2.0 (published_parsed) and Atom (updated_parsed) formats.
    Falls back to current time if no date is available.
    """
    time_struct = entry.get("published_parsed") or entry.get("updated_parsed")

    if time_struct:
        try:
            return datetime(*time_struct[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError) as e:
            logger.warning("Failed to parse date from entry: %s", e)

    return datetime.now(timezone.utc)


def _extract_image_url(entry: feedparser.FeedParserDict) -> str | None:
    """Image from media_content, media_thumbnail, or an image enclosure."""
    for media in entry.get("media_content", []):
        if media.get("type", "").startswith("image/"):
            return media.get("url")

    thumbnails = entry.get("media_thumbnail", [])
    if thumbnails:
        return thumbnails[0].get("url")

    for enclosure in entry.get("enclosures", []):
        if enclosure.get("type", "").startswith("image/"):
            return enclosure.get("href")

    return None


def _extract_tags(entry: feedparser.FeedParserDict) -> list[str]:
    tags: list[str] = []
    for tag in entry.get("tags", []):
        term = (tag.get("term") or "").strip()
        if term and term not in tags:
            tags.append(term)
    return tags


def _extract_body(entry: feedparser.FeedParserDict) -> tuple[str, str]:
    """Return (excerpt, content) as plain text.

    The excerpt comes from summary/description, the content from the first
    full content block (content:encoded), each falling back to the other.
    """
    summary = clean_html(entry.get("summary") or entry.get("description") or "")
    content = ""
    blocks = entry.get("content") or []
    if blocks:
        content = clean_html(blocks[0].get("value", ""))
    content = content or summary
    excerpt = _truncate(summary or content)
    return excerpt, content


def parse_feed_entries(feed_data: str, source: RssSource) -> list[ArticleCreate]:
    """Parse RSS/Atom feed data into article payloads.

    Entries without a link or title are skipped.
    """
    parsed = feedparser.parse(feed_data)

    if parsed.bozo and parsed.bozo_exception:
        logger.warning(
            "Feed parsing warning for %s: %s",
            source.name,
            parsed.bozo_exception,
        )

    articles: list[ArticleCreate] = []

    for entry in parsed.entries:
        link = entry.get("link")
        title = clean_html(entry.get("title") or "")

        if not link or not title:
            logger.debug("Skipping entry without link or title")
            continue

        excerpt, content = _extract_body(entry)
        tags = _extract_tags(entry)
        articles.append(
            ArticleCreate(
                title=title,
                excerpt=excerpt,
                content=content,
                url=link,
                image_url=_extract_image_url(entry),
                category=category_from_tags(tags, default=source.category),
                tags=tags,
                author=(entry.get("author") or "").strip() or source.name,
                source=source.name,
                source_type=SourceType.RSS,
                published_at=_parse_published_date(entry),
                is_lgbtq_focused=source.is_lgbtq_focused
                or is_lgbtq_focused(title, content, tags),
            )
        )

    return articles


async def fetch_feed(url: str, timeout: float = REQUEST_TIMEOUT) -> str:
    """Fetch RSS feed content from URL.

    Raises:
        httpx.HTTPError: On network or HTTP errors.
    """
    client = get_shared_client()
    response = await client.get(
        url,
        timeout=timeout,
        follow_redirects=True,
        headers={
            "User-Agent": "PrismNews/1.0 (RSS Aggregator)",
            "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml",
        },
    )
    response.raise_for_status()
    return response.text


async def fetch_source(source: RssSource) -> list[ArticleCreate]:
    """Fetch and parse one RSS source. Errors are logged and yield []."""
    try:
        feed_data = await fetch_feed(source.url)
        articles = parse_feed_entries(feed_data, source)
        logger.info("Fetched %d articles from %s", len(articles), source.name)
        return articles
    except httpx.HTTPError as e:
        logger.error("HTTP error fetching %s: %s", source.name, e)
        return []
    except Exception as e:
        logger.error("Unexpected error processing %s: %s", source.name, e)
        return []
