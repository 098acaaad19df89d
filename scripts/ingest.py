"""Run one ingestion cycle from the command line and preview the feed.

The store is in-memory, so this is a dry run: it fetches the seeded RSS
sources (and NewsAPI, when NEWS_API_KEY is set) into a fresh store and prints
what the ranked feed would look like.

Usage:
    python -m scripts.ingest            # Fetch and preview
    python -m scripts.ingest --sample   # Include the demo articles
"""

import asyncio
import logging
import sys

from prism.config import get_settings
from prism.services.ingestion.orchestrator import run_ingestion
from prism.services.ranking import rank_tier
from prism.services.store import NewsStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


async def main() -> int:
    settings = get_settings()
    store = NewsStore.from_settings(settings)

    if "--sample" in sys.argv:
        store.load_sample_articles()

    print("Starting article ingestion...")
    try:
        stats = await run_ingestion(store, settings)
    finally:
        from prism.services.http_client import close_shared_client

        await close_shared_client()

    print("\nIngestion complete:")
    print(f"  Sources:  {stats.sources}")
    print(f"  Fetched:  {stats.fetched}")
    print(f"  New:      {stats.new}")
    print(f"  Skipped:  {stats.skipped}")
    print(f"  Failed:   {stats.failed}")

    page = store.articles.list()
    print(f"\nTop {len(page.articles)} of {page.total} articles:")
    for article in page.articles:
        tier = rank_tier(article.rank_score, article.is_promoted) or ""
        print(f"  {tier:>8} {article.published_at:%Y-%m-%d %H:%M}  {article.title[:70]}")

    trending = store.articles.trending_tags(5)
    if trending:
        print("\nTrending tags: " + ", ".join(f"{t.tag} ({t.count})" for t in trending))

    # Fail if there were failures and no new articles
    if stats.failed > 0 and stats.new == 0:
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
