"""
Catalog API endpoints (read-only)
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.api.deps import get_catalog_service
from storefront.schemas.product import (
    CategoryResponse,
    ProductListResponse,
    ProductResponse,
    ProductSort,
)
from storefront.services.catalog_service import CatalogService

router = APIRouter(tags=["catalog"])


@router.get("/categories", response_model=List[CategoryResponse], summary="Get all categories")
def get_categories(service: CatalogService = Depends(get_catalog_service)):
    """Retrieve all categories ordered by name"""
    return service.list_categories()


@router.get("/products", response_model=ProductListResponse, summary="Search products")
def get_products(
    q: Optional[str] = Query(None, description="Search term for title or description"),
    category: Optional[str] = Query(None, description="Category ID or slug"),
    sort: Optional[ProductSort] = Query(None, description="priceAsc, priceDesc, ratingDesc or titleAsc"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: Optional[int] = Query(None, ge=1, description="Products per page (capped at PAGE_SIZE_MAX)"),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Retrieve active products with pagination

    - **q**: case-insensitive search (any length)
    - **category**: category ID or slug (case-insensitive)
    - **sort**: default is newest first
    """
    return service.list_products(q=q, category=category, sort=sort, page=page, limit=limit)


@router.get("/products/{id_or_slug}", response_model=ProductResponse, summary="Get product")
def get_product(
    id_or_slug: str,
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Retrieve an active product by ID or slug

    - **id_or_slug**: numeric product ID or slug
    """
    product = service.get_product(id_or_slug)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )
    return product
