"""
Models package
"""
from storefront.models.category import Category
from storefront.models.product import Product, ProductImage
from storefront.models.order import Order, OrderItem

__all__ = ["Category", "Product", "ProductImage", "Order", "OrderItem"]
