"""
Services package
"""
from storefront.services.catalog_service import CatalogService
from storefront.services.fulfillment import FulfillmentDispatcher
from storefront.services.order_service import OrderService

__all__ = ["CatalogService", "FulfillmentDispatcher", "OrderService"]
