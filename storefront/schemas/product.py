"""
Pydantic schemas for catalog responses
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, Field

from storefront.schemas.common import CamelModel, PageMeta

ProductSort = Literal["priceAsc", "priceDesc", "ratingDesc", "titleAsc"]


class CategoryResponse(CamelModel):
    """Schema for category response"""
    id: int
    name: str
    slug: str


class ProductImageResponse(CamelModel):
    url: str
    is_primary: bool = False


class ProductSummary(CamelModel):
    """Product as shown in list views"""
    id: int
    title: str
    slug: str
    price_in_fils: int
    old_price_in_fils: Optional[int] = None
    discount_percent: Optional[int] = None
    currency: Optional[str] = None
    stock: int
    rating_rate: float = 0
    rating_count: int = 0
    status: str
    category: Optional[CategoryResponse] = None
    image: Optional[str] = Field(None, validation_alias=AliasChoices("image", "primary_image_url"))


class ProductResponse(ProductSummary):
    """Schema for product detail response"""
    description: Optional[str] = None
    images: List[ProductImageResponse] = []
    created_at: datetime
    updated_at: datetime


class ProductListResponse(PageMeta):
    """Schema for a page of products"""
    items: List[ProductSummary]
