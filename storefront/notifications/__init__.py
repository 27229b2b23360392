"""
Notification adapters: SMTP mail, WhatsApp templates, invoice rendering
"""
from storefront.notifications.mailer import Mailer, MailDeliveryError
from storefront.notifications.whatsapp import (
    MessagingError,
    WhatsAppClient,
    to_whatsapp_e164,
)

__all__ = [
    "Mailer",
    "MailDeliveryError",
    "MessagingError",
    "WhatsAppClient",
    "to_whatsapp_e164",
]
