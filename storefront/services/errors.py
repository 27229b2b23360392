"""
Order pipeline exceptions
"""


class OrderError(Exception):
    """Base exception for order errors"""
    pass


class InvalidOrderError(OrderError):
    """Order rejected before anything was persisted"""
    pass


class ProductUnavailableError(InvalidOrderError):
    """Referenced product does not exist or is not active"""

    def __init__(self, product_ref):
        self.product_ref = product_ref
        super().__init__(f"Product not found or inactive: {product_ref}")


class InsufficientStockError(InvalidOrderError):
    """Requested quantity exceeds tracked stock"""

    def __init__(self, title: str):
        self.title = title
        super().__init__(f"Insufficient stock for product: {title}")


class DuplicateInvoiceError(OrderError):
    """Could not allocate a unique invoice number"""
    pass


class OrderNotFoundError(OrderError):
    """Order not found"""
    pass


class InvalidStatusTransitionError(OrderError):
    """Status change not allowed from the current status"""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change order status from '{current}' to '{requested}'")
