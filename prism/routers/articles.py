"""Article feed endpoints: listing, search, engagement, and editorial controls."""

from fastapi import APIRouter, Depends, Query

from prism.dependencies import get_articles
from prism.models.article import (
    MAX_PAGE_SIZE,
    Article,
    ArticleCreate,
    ArticlePage,
    ArticleQuery,
    ArticleUpdate,
    PromoteRequest,
    TagCount,
)
from prism.services.repository import ArticleRepository

router = APIRouter(prefix="/articles", tags=["articles"])


@router.get("", response_model=ArticlePage)
async def list_articles(
    query: str | None = Query(
        default=None,
        description="Free-text search across title, excerpt, content, tags, author and category",
    ),
    category: str | None = Query(
        default=None,
        description="Filter by category (case-insensitive); 'all' disables the filter",
    ),
    tags: list[str] | None = Query(
        default=None,
        description="Match articles carrying any of these tags",
    ),
    source: str | None = Query(
        default=None,
        description="Filter by source name substring (case-insensitive)",
    ),
    lgbtq_focused: bool | None = Query(
        default=None,
        description="Only focused (true) or only unfocused (false) articles",
    ),
    limit: int = Query(
        default=20,
        ge=1,
        le=MAX_PAGE_SIZE,
        description="Maximum number of articles to return",
    ),
    offset: int = Query(
        default=0,
        ge=0,
        description="Number of articles to skip",
    ),
    articles: ArticleRepository = Depends(get_articles),
):
    """Get a ranked page of articles, searched when ``query`` is given."""
    criteria = ArticleQuery(
        query=query,
        category=category,
        tags=tags,
        source=source,
        lgbtq_focused=lgbtq_focused,
        limit=limit,
        offset=offset,
    )
    if criteria.query and criteria.query.strip():
        return articles.search(criteria.query, criteria)
    return articles.list(criteria)


@router.get("/trending-tags", response_model=list[TagCount])
async def trending_tags(
    limit: int = Query(default=10, ge=1, le=MAX_PAGE_SIZE),
    articles: ArticleRepository = Depends(get_articles),
):
    """Most frequent tags across visible articles."""
    return articles.trending_tags(limit)


@router.get("/suggestions", response_model=list[str])
async def search_suggestions(
    prefix: str = Query(default="", description="Typed prefix to complete"),
    limit: int = Query(default=5, ge=1, le=20),
    articles: ArticleRepository = Depends(get_articles),
):
    """Search-box completions drawn from titles, tags, and categories."""
    return articles.suggestions(prefix, limit)


@router.post("", response_model=Article, status_code=201)
async def create_article(
    payload: ArticleCreate,
    articles: ArticleRepository = Depends(get_articles),
):
    """Add an article by hand."""
    return articles.create(payload)


@router.get("/{article_id}", response_model=Article)
async def get_article_by_id(
    article_id: str, articles: ArticleRepository = Depends(get_articles)
):
    """Get a single article by ID (hidden articles included)."""
    return articles.get(article_id)


@router.patch("/{article_id}", response_model=Article)
async def update_article(
    article_id: str,
    changes: ArticleUpdate,
    articles: ArticleRepository = Depends(get_articles),
):
    return articles.update(article_id, changes)


@router.delete("/{article_id}")
async def delete_article(
    article_id: str, articles: ArticleRepository = Depends(get_articles)
):
    articles.delete(article_id)
    return {"success": True}


@router.post("/{article_id}/like", response_model=Article)
async def like_article(
    article_id: str, articles: ArticleRepository = Depends(get_articles)
):
    return articles.like(article_id)


@router.post("/{article_id}/promote", response_model=Article)
async def promote_article(
    article_id: str,
    body: PromoteRequest | None = None,
    articles: ArticleRepository = Depends(get_articles),
):
    """Promote an article; rank score defaults to 100 (featured)."""
    rank_score = body.rank_score if body else None
    return articles.promote(article_id, rank_score)


@router.delete("/{article_id}/promote", response_model=Article)
async def unpromote_article(
    article_id: str, articles: ArticleRepository = Depends(get_articles)
):
    return articles.unpromote(article_id)


@router.post("/{article_id}/hide", response_model=Article)
async def hide_article(
    article_id: str, articles: ArticleRepository = Depends(get_articles)
):
    return articles.hide(article_id)


@router.delete("/{article_id}/hide", response_model=Article)
async def unhide_article(
    article_id: str, articles: ArticleRepository = Depends(get_articles)
):
    return articles.unhide(article_id)
