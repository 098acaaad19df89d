"""Administrative endpoints: full article dump, manual ingestion, demo data."""

import logging

from fastapi import APIRouter, Depends, Query

from prism.config import Settings
from prism.dependencies import get_app_settings, get_store, require_ingest_key
from prism.models.article import Article
from prism.services.ingestion.orchestrator import run_ingestion
from prism.services.store import NewsStore

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@router.get("/articles", response_model=list[Article])
async def list_all_articles(
    include_hidden: bool = Query(
        default=False, description="Include hidden articles in the dump"
    ),
    store: NewsStore = Depends(get_store),
):
    """Every article in ranking order, unpaginated."""
    return store.articles.list_all(include_hidden=include_hidden)


@router.post("/refresh", dependencies=[Depends(require_ingest_key)])
async def trigger_refresh(
    store: NewsStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """Run an ingestion cycle now. Protected by API key."""
    logger.info("Manual content refresh triggered")
    stats = await run_ingestion(store, settings)
    return stats.to_dict()


@router.post("/sample-articles", dependencies=[Depends(require_ingest_key)])
async def load_sample_articles(store: NewsStore = Depends(get_store)):
    """Load the demo articles. Ones already in the store are skipped."""
    loaded = store.load_sample_articles()
    logger.info("Loaded %d sample articles on request", loaded)
    return {"message": f"Loaded {loaded} sample articles", "loaded": loaded}
