"""
Template variables for the WhatsApp order confirmation
"""
from typing import Dict

from storefront.notifications.invoice_renderer import format_address
from storefront.schemas.order import OrderResponse
from storefront.utils.money import fils_to_amount


def order_template_variables(
    order: OrderResponse,
    payment_method_label: str,
    delivery_eta: str,
    default_currency: str = "KWD"
) -> Dict[str, str]:
    """
    Variables "1".."7" of the order confirmation template:
    name, invoice number, total, currency, payment method, address, ETA
    """
    currency = order.items[0].currency if order.items else default_currency
    return {
        "1": order.customer.name,
        "2": order.invoice_no,
        "3": fils_to_amount(order.total_in_fils),
        "4": currency,
        "5": order.payment_method or payment_method_label,
        "6": format_address(order),
        "7": delivery_eta,
    }
