"""
Schemas package
"""
from storefront.schemas.order import (
    OrderCreate,
    OrderStatusUpdate,
    OrderPaymentUpdate,
    OrderResponse,
    OrderCreatedResponse,
    OrderListResponse
)
from storefront.schemas.product import (
    CategoryResponse,
    ProductSummary,
    ProductResponse,
    ProductListResponse
)

__all__ = [
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderPaymentUpdate",
    "OrderResponse",
    "OrderCreatedResponse",
    "OrderListResponse",
    "CategoryResponse",
    "ProductSummary",
    "ProductResponse",
    "ProductListResponse"
]
