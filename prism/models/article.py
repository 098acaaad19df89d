"""Article data models."""

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Fields concatenated (in this order) into the lowercase search vector
SEARCH_VECTOR_FIELDS = ("title", "excerpt", "content", "tags", "author", "category")


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so mixed inputs stay comparable."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SourceType(StrEnum):
    RSS = "rss"
    API = "api"


class ArticleCreate(BaseModel):
    """Article payload supplied by ingestion or an editor."""

    title: str = Field(..., min_length=1)
    excerpt: str
    content: str
    url: str = Field(..., min_length=1)
    image_url: str | None = None
    category: str = Field(..., min_length=1)
    tags: list[str] = []
    author: str
    source: str = Field(..., min_length=1)
    source_type: SourceType
    published_at: datetime
    is_lgbtq_focused: bool = False

    @model_validator(mode="before")
    @classmethod
    def _migrate_old_fields(cls, data: dict) -> dict:
        """Backward compat: older ingestion wrote NewsAPI items as 'newsapi'."""
        if isinstance(data, dict) and data.get("source_type") == "newsapi":
            data = {**data, "source_type": SourceType.API}
        return data

    @field_validator("published_at")
    @classmethod
    def _published_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class ArticleUpdate(BaseModel):
    """Partial article update. Only fields that are set get merged."""

    title: str | None = Field(default=None, min_length=1)
    excerpt: str | None = None
    content: str | None = None
    url: str | None = Field(default=None, min_length=1)
    image_url: str | None = None
    category: str | None = Field(default=None, min_length=1)
    tags: list[str] | None = None
    author: str | None = None
    source: str | None = Field(default=None, min_length=1)
    source_type: SourceType | None = None
    published_at: datetime | None = None
    is_lgbtq_focused: bool | None = None

    @field_validator("published_at")
    @classmethod
    def _published_at_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)


class Article(ArticleCreate):
    """Stored article with engagement, placement, and visibility state."""

    id: str
    created_at: datetime
    likes: int = 0
    is_promoted: bool = False
    rank_score: int = 0  # meaningful only while promoted
    promoted_at: datetime | None = None
    is_hidden: bool = False
    hidden_at: datetime | None = None
    search_vector: str = ""


class ArticleQuery(BaseModel):
    """Structured list/search criteria. Every filter is optional."""

    query: str | None = None
    category: str | None = None  # "all" disables the category filter
    tags: list[str] | None = None  # matches any of the given tags
    source: str | None = None  # case-insensitive substring
    lgbtq_focused: bool | None = None
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    offset: int = Field(default=0, ge=0)


class ArticlePage(BaseModel):
    """One page of a ranked article listing."""

    articles: list[Article]
    total: int
    limit: int
    offset: int


class PromoteRequest(BaseModel):
    """Body for promoting an article; rank score falls back to the default."""

    rank_score: int | None = Field(default=None, ge=0)


class TagCount(BaseModel):
    tag: str
    count: int
