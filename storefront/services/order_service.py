"""
Order Service - Business Logic Layer
"""
import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.config import settings as default_settings
from storefront.models.order import Order
from storefront.publishers.event_publisher import EventPublisher
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.schemas.order import (
    OrderCreate,
    OrderItemIn,
    OrderListResponse,
    OrderPaymentUpdate,
    OrderResponse,
)
from storefront.services.errors import (
    DuplicateInvoiceError,
    InsufficientStockError,
    InvalidOrderError,
    OrderNotFoundError,
)
from storefront.services.invoice import generate_invoice_no
from storefront.services.order_status import ensure_transition
from storefront.services.pricing import (
    CartLine,
    PricedCart,
    ShippingPolicy,
    price_cart,
    unique_product_ids,
)
from storefront.utils.pagination import page_envelope, parse_pagination

logger = logging.getLogger(__name__)


def is_invoice_conflict(error: IntegrityError) -> bool:
    return "invoice_no" in str(error.orig)


class OrderService:
    """Service layer for order business logic"""

    def __init__(self, db: Session, event_publisher: Optional[EventPublisher] = None, settings=default_settings):
        self.db = db
        self.repository = OrderRepository(db)
        self.product_repository = ProductRepository(db)
        self.event_publisher = event_publisher
        self.settings = settings
        self.shipping_policy = ShippingPolicy.from_settings(settings)

    def quote(self, items: List[OrderItemIn]) -> PricedCart:
        """
        Price the requested lines against live, active products

        Raises:
            InvalidOrderError: If the cart is empty, a product is missing or
                inactive, or a line exceeds tracked stock
        """
        lines = [CartLine(product_id=item.product_id, qty=item.qty) for item in items]
        if not lines:
            raise InvalidOrderError("Order items are required")

        products = self.product_repository.get_active_by_ids(unique_product_ids(lines))
        by_id = {product.id: product for product in products}
        return price_cart(lines, by_id, self.shipping_policy, self.settings.DEFAULT_CURRENCY)

    def create_order(self, order_data: OrderCreate, user_id: Optional[str] = None) -> Order:
        """
        Create new order

        Steps:
        1. Price every line from the product rows (client prices are never read)
        2. Check each line against active status and tracked stock
        3. Apply the shipping fee policy
        4. Save the order under a fresh invoice number, retrying on collision
        5. Under the reserve stock policy, decrement stock in the same transaction

        Notifications and deferred stock updates are left to the
        FulfillmentDispatcher once the order is committed.

        Args:
            order_data: Validated checkout payload
            user_id: Owning user, if the buyer is signed in

        Returns:
            Persisted order in status 'pending'

        Raises:
            InvalidOrderError: Product missing/inactive or insufficient stock
            DuplicateInvoiceError: Invoice number collided on every attempt
        """
        priced = self.quote(order_data.items)

        customer = order_data.customer
        address = order_data.shipping_address
        order_fields = {
            'user_id': user_id,
            'customer_name': customer.name,
            'customer_phone': customer.phone,
            'customer_email': customer.email,
            'ship_area': address.area,
            'ship_block': address.block,
            'ship_street': address.street,
            'ship_avenue': address.avenue,
            'ship_house_no': address.house_no,
            'ship_notes': address.notes,
            'subtotal_in_fils': priced.subtotal_in_fils,
            'shipping_in_fils': priced.shipping_in_fils,
            'total_in_fils': priced.total_in_fils,
            'status': 'pending',
        }
        order = self._persist(order_fields, priced)
        logger.info(
            "Order %s created: %d line(s), total %d fils",
            order.invoice_no, len(priced.lines), order.total_in_fils
        )
        return order

    def _persist(self, order_fields: dict, priced: PricedCart) -> Order:
        reserve = self.settings.STOCK_POLICY == "reserve"
        attempts = max(1, self.settings.INVOICE_MAX_ATTEMPTS)
        items = [line.as_item() for line in priced.lines]

        for attempt in range(1, attempts + 1):
            invoice_no = generate_invoice_no()
            try:
                order = self.repository.add({**order_fields, 'invoice_no': invoice_no}, items)
                if reserve:
                    self._reserve_stock(priced)
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                if not is_invoice_conflict(e):
                    raise
                if attempt == attempts:
                    raise DuplicateInvoiceError(
                        f"Could not allocate a unique invoice number after {attempts} attempt(s)"
                    ) from e
                logger.warning("Invoice number %s already taken, regenerating", invoice_no)
                continue
            except InsufficientStockError:
                self.db.rollback()
                raise

            self.db.refresh(order)
            return order

    def _reserve_stock(self, priced: PricedCart) -> None:
        for line in priced.lines:
            if not self.product_repository.reserve_stock(line.product_id, line.qty):
                raise InsufficientStockError(line.title)

    def get_order(self, order_id: int) -> Order:
        """Get order by ID"""
        order = self.repository.get_by_id(order_id)
        if not order:
            raise OrderNotFoundError(f"Order with id={order_id} not found")
        return order

    def get_order_by_invoice(self, invoice_no: str) -> Order:
        """Get order by invoice number"""
        order = self.repository.get_by_invoice_no(invoice_no)
        if not order:
            raise OrderNotFoundError(f"Order with invoice number {invoice_no} not found")
        return order

    def list_orders(
        self,
        status: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None
    ) -> OrderListResponse:
        """Get a page of orders, newest first"""
        page, limit, skip = parse_pagination(
            page, limit, self.settings.PAGE_SIZE_DEFAULT, self.settings.PAGE_SIZE_MAX
        )
        orders = self.repository.get_all(status=status, skip=skip, limit=limit)
        total = self.repository.count(status=status)
        return OrderListResponse(**page_envelope(
            [OrderResponse.model_validate(o) for o in orders], page, limit, total
        ))

    def update_order_status(self, order_id: int, new_status: str) -> Order:
        """
        Move an order to a new status

        Args:
            order_id: Order ID
            new_status: Requested status

        Returns:
            Updated order

        Raises:
            OrderNotFoundError: If the order does not exist
            InvalidStatusTransitionError: If the transition is not allowed
        """
        order = self.get_order(order_id)
        old_status = order.status
        ensure_transition(old_status, new_status)

        order = self.repository.update_status(order, new_status)
        logger.info("Order %s status %s -> %s", order.invoice_no, old_status, new_status)

        if self.event_publisher is not None:
            self.event_publisher.publish_order_status_changed({
                'order_id': order.id,
                'invoice_no': order.invoice_no,
                'old_status': old_status,
                'new_status': order.status,
                'updated_at': order.updated_at.isoformat() if order.updated_at else None
            })
        return order

    def update_payment(self, order_id: int, payment_data: OrderPaymentUpdate) -> Order:
        """Set payment method and/or payment status"""
        order = self.get_order(order_id)
        return self.repository.update_payment(order, payment_data.model_dump(exclude_unset=True))
