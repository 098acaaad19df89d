"""Category data models."""

from pydantic import BaseModel, Field

ALL_CATEGORY_SLUG = "all"

SLUG_PATTERN = r"^[a-z0-9][a-z0-9-]*$"


class CategoryCreate(BaseModel):
    """New category. The slug is derived from the name when omitted."""

    name: str = Field(..., min_length=1, max_length=100)
    slug: str | None = Field(default=None, pattern=SLUG_PATTERN, max_length=100)
    description: str | None = None
    is_active: bool = True
    sort_order: int = 0


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    slug: str | None = Field(default=None, pattern=SLUG_PATTERN, max_length=100)
    description: str | None = None
    is_active: bool | None = None
    sort_order: int | None = None


class Category(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    is_active: bool = True
    sort_order: int = 0


class CategoryOrder(BaseModel):
    id: str
    sort_order: int


class CategoryReorder(BaseModel):
    """Body for bulk reordering categories."""

    category_orders: list[CategoryOrder]
