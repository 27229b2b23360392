"""
Twilio WhatsApp webhooks (inbound messages and delivery status callbacks)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Form
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/whatsapp", tags=["whatsapp"])

FAILED_STATUSES = {"failed", "undelivered"}


@router.post("/status", response_class=PlainTextResponse, summary="Delivery status callback")
def delivery_status(
    message_sid: Optional[str] = Form(None, alias="MessageSid"),
    message_status: Optional[str] = Form(None, alias="MessageStatus"),
    to: Optional[str] = Form(None, alias="To"),
    error_code: Optional[str] = Form(None, alias="ErrorCode"),
    error_message: Optional[str] = Form(None, alias="ErrorMessage")
):
    """
    Receive a Twilio status callback for a sent message

    Failed or undelivered messages are logged at WARNING with the
    provider error; every other status at INFO. Always answers 200 so
    Twilio does not retry.
    """
    if (message_status or "").lower() in FAILED_STATUSES:
        logger.warning(
            "WhatsApp message %s to %s %s (error %s: %s)",
            message_sid, to, message_status, error_code, error_message
        )
    else:
        logger.info("WhatsApp message %s to %s %s", message_sid, to, message_status)
    return "OK"


@router.post("/webhook", response_class=PlainTextResponse, summary="Inbound message webhook")
def incoming_message(
    message_sid: Optional[str] = Form(None, alias="MessageSid"),
    sender: Optional[str] = Form(None, alias="From"),
    profile_name: Optional[str] = Form(None, alias="ProfileName"),
    body: Optional[str] = Form(None, alias="Body")
):
    """Receive an inbound WhatsApp message; it is logged, no reply is sent"""
    logger.info("WhatsApp message %s from %s (%s): %s", message_sid, sender, profile_name, body)
    return "OK"
