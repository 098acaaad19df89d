"""Session bookmark data models."""

from datetime import datetime

from pydantic import BaseModel, Field


class BookmarkCreate(BaseModel):
    article_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)


class Bookmark(BookmarkCreate):
    id: str
    created_at: datetime
