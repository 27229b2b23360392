"""
Catalog Service - read-only product and category queries
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from storefront.config import settings as default_settings
from storefront.repositories.product_repository import CategoryRepository, ProductRepository
from storefront.schemas.product import (
    CategoryResponse,
    ProductListResponse,
    ProductResponse,
    ProductSummary,
)
from storefront.utils.pagination import page_envelope, parse_pagination


class CatalogService:
    """Service layer for catalog browsing"""

    def __init__(self, db: Session, settings=default_settings):
        self.products = ProductRepository(db)
        self.categories = CategoryRepository(db)
        self.settings = settings

    def list_categories(self) -> List[CategoryResponse]:
        """Get all categories"""
        return [CategoryResponse.model_validate(c) for c in self.categories.get_all()]

    def _resolve_category_id(self, category: str) -> Optional[int]:
        if category.isdigit():
            return int(category)
        found = self.categories.get_by_slug(category)
        return found.id if found else None

    def list_products(
        self,
        q: Optional[str] = None,
        category: Optional[str] = None,
        sort: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None
    ) -> ProductListResponse:
        """
        Search active products

        - **q**: case-insensitive match on title or description
        - **category**: category ID or slug; an unknown slug gives an empty page
        - **sort**: priceAsc | priceDesc | ratingDesc | titleAsc (default newest first)
        """
        page, limit, skip = parse_pagination(
            page, limit, self.settings.PAGE_SIZE_DEFAULT, self.settings.PAGE_SIZE_MAX
        )

        category_id = None
        if category:
            category_id = self._resolve_category_id(category.strip())
            if category_id is None:
                return ProductListResponse(**page_envelope([], page, limit, 0))

        products, total = self.products.search(
            q=q, category_id=category_id, sort=sort, skip=skip, limit=limit
        )
        return ProductListResponse(**page_envelope(
            [ProductSummary.model_validate(p) for p in products], page, limit, total
        ))

    def get_product(self, id_or_slug: str) -> Optional[ProductResponse]:
        """Get an active product by ID or slug"""
        if id_or_slug.isdigit():
            product = self.products.get_active_by_id(int(id_or_slug))
        else:
            product = self.products.get_active_by_slug(id_or_slug)
        if not product:
            return None
        return ProductResponse.model_validate(product)
