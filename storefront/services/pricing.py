"""
Pricing ledger: turns a requested cart into priced order lines

Everything here is pure computation over a snapshot of product rows that
the caller has already fetched. Prices always come from the product, never
from the client, and all money is integer fils.
"""
from dataclasses import dataclass
from numbers import Number
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from storefront.services.errors import (
    InsufficientStockError,
    InvalidOrderError,
    ProductUnavailableError,
)


@dataclass(frozen=True)
class CartLine:
    product_id: int
    qty: int


@dataclass(frozen=True)
class ShippingPolicy:
    """Flat shipping fee, waived once the subtotal reaches the threshold"""
    free_threshold_in_fils: int
    base_fee_in_fils: int

    @classmethod
    def from_settings(cls, settings) -> "ShippingPolicy":
        return cls(
            free_threshold_in_fils=settings.FREE_SHIP_THRESHOLD_IN_FILS,
            base_fee_in_fils=settings.BASE_SHIPPING_IN_FILS,
        )

    def fee_for(self, subtotal_in_fils: int) -> int:
        if subtotal_in_fils >= self.free_threshold_in_fils:
            return 0
        return self.base_fee_in_fils


@dataclass(frozen=True)
class PricedLine:
    product_id: int
    title: str
    price_in_fils: int
    currency: str
    qty: int
    image: Optional[str] = None

    @property
    def line_total_in_fils(self) -> int:
        return self.price_in_fils * self.qty

    def as_item(self) -> dict:
        return {
            "product_id": self.product_id,
            "title": self.title,
            "price_in_fils": self.price_in_fils,
            "currency": self.currency,
            "qty": self.qty,
            "image": self.image,
        }


@dataclass(frozen=True)
class PricedCart:
    lines: Tuple[PricedLine, ...]
    subtotal_in_fils: int
    shipping_in_fils: int

    @property
    def total_in_fils(self) -> int:
        return self.subtotal_in_fils + self.shipping_in_fils


def to_int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def unique_product_ids(lines: Iterable[CartLine]) -> List[int]:
    """Referenced product IDs, deduplicated, in first-seen order"""
    return list(dict.fromkeys(line.product_id for line in lines))


def check_availability(product, product_ref, qty: int) -> None:
    """
    Inventory guard for one cart line

    Stock is read as-is; no reservation is taken here.

    Raises:
        ProductUnavailableError: If no active product matched the reference
        InsufficientStockError: If tracked stock is below the requested quantity
    """
    if product is None:
        raise ProductUnavailableError(product_ref)
    stock = product.stock
    if isinstance(stock, Number) and stock < qty:
        raise InsufficientStockError(product.title)


def price_cart(
    lines: Sequence[CartLine],
    products: Mapping[int, object],
    policy: ShippingPolicy,
    default_currency: str = "KWD"
) -> PricedCart:
    """
    Price a cart against active products

    Args:
        lines: Requested cart lines
        products: Active products keyed by ID
        policy: Shipping fee policy
        default_currency: Currency for products without one

    Returns:
        Priced lines with subtotal and shipping

    Raises:
        InvalidOrderError: If the cart is empty or any line is unavailable
    """
    if not lines:
        raise InvalidOrderError("Order items are required")

    priced = []
    subtotal = 0
    for line in lines:
        qty = max(1, to_int(line.qty, 1))
        product = products.get(line.product_id)
        check_availability(product, line.product_id, qty)

        price = to_int(product.price_in_fils, 0)
        priced.append(PricedLine(
            product_id=product.id,
            title=product.title,
            price_in_fils=price,
            currency=product.currency or default_currency,
            qty=qty,
            image=product.primary_image_url,
        ))
        subtotal += price * qty

    return PricedCart(
        lines=tuple(priced),
        subtotal_in_fils=subtotal,
        shipping_in_fils=policy.fee_for(subtotal),
    )
