"""RSS source management endpoints."""

from fastapi import APIRouter, Depends, Response

from prism.dependencies import get_sources, get_store, require_ingest_key
from prism.models.source import RssSource, RssSourceCreate, RssSourceUpdate
from prism.services.catalog import SourceRepository
from prism.services.ingestion.orchestrator import refresh_source
from prism.services.store import NewsStore

router = APIRouter(prefix="/sources", tags=["sources"])


@router.get("", response_model=list[RssSource])
async def list_sources(sources: SourceRepository = Depends(get_sources)):
    return sources.list()


@router.post("", response_model=RssSource, status_code=201)
async def create_source(
    payload: RssSourceCreate,
    sources: SourceRepository = Depends(get_sources),
):
    return sources.create(payload)


@router.patch("/{source_id}", response_model=RssSource)
async def update_source(
    source_id: str,
    changes: RssSourceUpdate,
    sources: SourceRepository = Depends(get_sources),
):
    return sources.update(source_id, changes)


@router.delete("/{source_id}", status_code=204)
async def delete_source(
    source_id: str, sources: SourceRepository = Depends(get_sources)
):
    sources.delete(source_id)
    return Response(status_code=204)


@router.post("/{source_id}/refresh", dependencies=[Depends(require_ingest_key)])
async def refresh_single_source(
    source_id: str, store: NewsStore = Depends(get_store)
):
    """Fetch one feed now. Protected by API key."""
    stats = await refresh_source(store, source_id)
    return {"message": f"Fetched {stats.new} new articles", **stats.to_dict()}
