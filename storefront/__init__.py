"""
Storefront - e-commerce backend: catalog, orders and order notifications
"""
__version__ = "1.0.0"
