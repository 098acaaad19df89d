"""RSS source data models."""

from datetime import datetime

from pydantic import BaseModel, Field


class RssSourceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    category: str = "news"  # default category for articles from this feed
    is_active: bool = True
    is_lgbtq_focused: bool = False


class RssSourceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    url: str | None = Field(default=None, min_length=1)
    category: str | None = None
    is_active: bool | None = None
    is_lgbtq_focused: bool | None = None


class RssSource(RssSourceCreate):
    id: str
    last_fetched: datetime | None = None
