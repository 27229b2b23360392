"""
Fulfillment side-effects dispatched after an order is committed
"""
import logging
from typing import Callable, Optional

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from storefront.notifications.invoice_renderer import (
    invoice_subject,
    render_invoice_html,
    render_invoice_text,
)
from storefront.notifications.mailer import Mailer
from storefront.notifications.order_message import order_template_variables
from storefront.notifications.whatsapp import WhatsAppClient, to_whatsapp_e164
from storefront.publishers.event_publisher import EventPublisher
from storefront.repositories.product_repository import ProductRepository
from storefront.schemas.order import OrderResponse

logger = logging.getLogger(__name__)


class FulfillmentDispatcher:
    """
    Runs the post-commit actions of a new order

    Each action is best-effort and at-most-once: failures are logged and
    never reach the caller, never change the order and never stop the
    other actions. The persisted order stays the record of truth.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        mailer: Mailer,
        whatsapp: WhatsAppClient,
        settings,
        event_publisher: Optional[EventPublisher] = None
    ):
        self.session_factory = session_factory
        self.mailer = mailer
        self.whatsapp = whatsapp
        self.settings = settings
        self.event_publisher = event_publisher

    def dispatch(self, background_tasks: BackgroundTasks, order: OrderResponse) -> None:
        """Schedule the side-effects to run after the response is sent"""
        if self.settings.STOCK_POLICY == "deferred":
            background_tasks.add_task(self.decrement_stock, order)
        background_tasks.add_task(self.send_invoice_email, order)
        background_tasks.add_task(self.send_order_message, order)
        if self.event_publisher is not None and self.event_publisher.enabled:
            background_tasks.add_task(self.publish_order_created, order)

    def decrement_stock(self, order: OrderResponse) -> None:
        """
        Decrement stock for every line of the order

        The decrement is conditional on enough stock remaining, so a product
        never goes negative; a refused decrement means the product was
        oversold between the availability check and now.
        """
        db = self.session_factory()
        try:
            repository = ProductRepository(db)
            for item in order.items:
                try:
                    if not repository.decrement_stock(item.product_id, item.qty):
                        logger.warning(
                            "Oversold: could not take %d of product %s for order %s (stock %s)",
                            item.qty, item.product_id, order.invoice_no,
                            repository.get_stock(item.product_id)
                        )
                except Exception:
                    db.rollback()
                    logger.exception(
                        "Stock decrement error for product %s (order %s)",
                        item.product_id, order.invoice_no
                    )
        finally:
            db.close()

    def send_invoice_email(self, order: OrderResponse) -> None:
        """Email the invoice to the customer (if they gave an address) and the store"""
        if not self.settings.MAIL_ENABLED:
            logger.debug("Mail disabled, no invoice email for %s", order.invoice_no)
            return

        store = self.settings.STORE_NAME
        to = order.customer.email or None
        try:
            self.mailer.send(
                subject=invoice_subject(order, store),
                html=render_invoice_html(order, store),
                text=render_invoice_text(order, store),
                to=to,
                reply_to=to,
            )
        except Exception as e:
            logger.error("Email send error for order %s: %s", order.invoice_no, e)

    async def send_order_message(self, order: OrderResponse) -> None:
        """Send the WhatsApp order confirmation template to the customer"""
        if not self.settings.WHATSAPP_ENABLED:
            logger.debug("WhatsApp disabled, no confirmation for %s", order.invoice_no)
            return

        try:
            to = to_whatsapp_e164(order.customer.phone, self.settings.DEFAULT_COUNTRY_CODE)
            variables = order_template_variables(
                order,
                payment_method_label=self.settings.DEFAULT_PAYMENT_METHOD_LABEL,
                delivery_eta=self.settings.DELIVERY_ETA,
                default_currency=self.settings.DEFAULT_CURRENCY,
            )
            await self.whatsapp.send_template(
                to, self.settings.WHATSAPP_ORDER_TEMPLATE_SID, variables
            )
        except Exception as e:
            logger.error("WhatsApp send error for order %s: %s", order.invoice_no, e)

    def publish_order_created(self, order: OrderResponse) -> None:
        """Publish OrderCreated to the event exchange"""
        self.event_publisher.publish_order_created({
            'order_id': order.id,
            'invoice_no': order.invoice_no,
            'items': [
                {'product_id': item.product_id, 'qty': item.qty, 'price_in_fils': item.price_in_fils}
                for item in order.items
            ],
            'subtotal_in_fils': order.subtotal_in_fils,
            'shipping_in_fils': order.shipping_in_fils,
            'total_in_fils': order.total_in_fils,
            'customer_email': order.customer.email,
            'status': order.status
        })


def build_dispatcher(
    settings,
    session_factory: Callable[[], Session],
    event_publisher: Optional[EventPublisher] = None
) -> FulfillmentDispatcher:
    """Construct the dispatcher and its transport clients from settings"""
    return FulfillmentDispatcher(
        session_factory=session_factory,
        mailer=Mailer.from_settings(settings),
        whatsapp=WhatsAppClient.from_settings(settings),
        settings=settings,
        event_publisher=event_publisher or EventPublisher(settings),
    )
