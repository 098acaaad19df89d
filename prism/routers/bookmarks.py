"""Session bookmark endpoints."""

from fastapi import APIRouter, Depends, Query, Response

from prism.dependencies import get_bookmarks
from prism.models.bookmark import Bookmark, BookmarkCreate
from prism.services.catalog import BookmarkRepository

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.get("", response_model=list[Bookmark])
async def list_bookmarks(
    session_id: str = Query(..., min_length=1, description="Reader session ID"),
    bookmarks: BookmarkRepository = Depends(get_bookmarks),
):
    return bookmarks.list_by_session(session_id)


@router.post("", response_model=Bookmark, status_code=201)
async def create_bookmark(
    payload: BookmarkCreate,
    bookmarks: BookmarkRepository = Depends(get_bookmarks),
):
    return bookmarks.create(payload)


@router.delete("/{article_id}", status_code=204)
async def delete_bookmark(
    article_id: str,
    session_id: str = Query(..., min_length=1),
    bookmarks: BookmarkRepository = Depends(get_bookmarks),
):
    bookmarks.delete(article_id, session_id)
    return Response(status_code=204)
