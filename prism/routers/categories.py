"""Category endpoints."""

from fastapi import APIRouter, Depends, Query, Response

from prism.dependencies import get_categories
from prism.models.category import (
    Category,
    CategoryCreate,
    CategoryReorder,
    CategoryUpdate,
)
from prism.services.catalog import CategoryRepository

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[Category])
async def list_categories(
    include_inactive: bool = Query(default=False),
    categories: CategoryRepository = Depends(get_categories),
):
    """Categories in display order."""
    return categories.list(include_inactive=include_inactive)


@router.post("", response_model=Category, status_code=201)
async def create_category(
    payload: CategoryCreate,
    categories: CategoryRepository = Depends(get_categories),
):
    return categories.create(payload)


@router.post("/reorder", response_model=list[Category])
async def reorder_categories(
    payload: CategoryReorder,
    categories: CategoryRepository = Depends(get_categories),
):
    return categories.reorder((o.id, o.sort_order) for o in payload.category_orders)


@router.patch("/{category_key}", response_model=Category)
async def update_category(
    category_key: str,
    changes: CategoryUpdate,
    categories: CategoryRepository = Depends(get_categories),
):
    """Update a category addressed by id, slug, or name."""
    category = categories.resolve(category_key)
    return categories.update(category.id, changes)


@router.delete("/{category_key}", status_code=204)
async def delete_category(
    category_key: str,
    categories: CategoryRepository = Depends(get_categories),
):
    """Delete a category addressed by id, slug, or name."""
    category = categories.resolve(category_key)
    categories.delete(category.id)
    return Response(status_code=204)
