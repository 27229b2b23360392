"""
WhatsApp template messages via the Twilio REST API, with retry logic
"""
import json
import logging
from typing import Dict, Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from storefront.config import settings

logger = logging.getLogger(__name__)


class MessagingError(Exception):
    """Base exception for messaging errors"""
    pass


class MessagingConfigurationError(MessagingError):
    """Credentials, sender or template are not configured"""
    pass


class MessagingUnavailableError(MessagingError):
    """Messaging provider is unreachable"""
    pass


def to_whatsapp_e164(phone, country_code: str = "965") -> str:
    """
    Normalize a phone number to E.164

    '+96551234567' passes through, '96551234567' -> '+96551234567',
    8-digit local '51234567' -> '+96551234567', anything else gets a '+'.
    """
    raw = str(phone or "").strip()
    if raw.startswith("+"):
        return raw

    digits = "".join(ch for ch in raw if ch.isdigit())
    cc = "".join(ch for ch in str(country_code or "") if ch.isdigit())

    if cc and digits.startswith(cc) and len(digits) > 8:
        return f"+{digits}"
    if len(digits) == 8:
        return f"+{cc}{digits}"
    return f"+{digits}"


class WhatsAppClient:
    """Client for sending WhatsApp Content templates through Twilio"""

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        messaging_service_sid: Optional[str] = None,
        whatsapp_from: Optional[str] = None,
        status_callback: Optional[str] = None,
        api_url: str = "https://api.twilio.com",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.messaging_service_sid = messaging_service_sid
        self.whatsapp_from = whatsapp_from
        self.status_callback = status_callback
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, config) -> "WhatsAppClient":
        return cls(
            account_sid=config.TWILIO_ACCOUNT_SID,
            auth_token=config.TWILIO_AUTH_TOKEN,
            messaging_service_sid=config.TWILIO_MESSAGING_SERVICE_SID,
            whatsapp_from=config.TWILIO_WHATSAPP_FROM,
            status_callback=config.TWILIO_STATUS_CALLBACK,
            api_url=config.TWILIO_API_URL,
            timeout=config.HTTP_TIMEOUT,
        )

    @property
    def messages_url(self) -> str:
        return f"{self.api_url}/2010-04-01/Accounts/{self.account_sid}/Messages.json"

    def build_payload(self, to_e164: str, content_sid: str, variables: Dict[str, str]) -> Dict[str, str]:
        """
        Build the form payload for the Messages resource

        Raises:
            MessagingConfigurationError: If credentials, sender or template are missing
        """
        if not self.account_sid or not self.auth_token:
            raise MessagingConfigurationError("Twilio credentials are missing")
        if not content_sid:
            raise MessagingConfigurationError("WHATSAPP_ORDER_TEMPLATE_SID is missing")
        if not self.messaging_service_sid and not self.whatsapp_from:
            raise MessagingConfigurationError(
                "Provide TWILIO_MESSAGING_SERVICE_SID or TWILIO_WHATSAPP_FROM"
            )

        to = to_e164 if to_e164.startswith("whatsapp:") else f"whatsapp:{to_e164}"
        payload = {
            "To": to,
            "ContentSid": content_sid,
            "ContentVariables": json.dumps(variables),
        }
        if self.messaging_service_sid:
            payload["MessagingServiceSid"] = self.messaging_service_sid
        else:
            sender = self.whatsapp_from.removeprefix("whatsapp:")
            payload["From"] = f"whatsapp:{sender}"
        if self.status_callback:
            payload["StatusCallback"] = self.status_callback
        return payload

    @retry(
        stop=stop_after_attempt(settings.MAX_RETRIES),
        wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        reraise=True
    )
    async def _post(self, payload: Dict[str, str]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return await client.post(
                self.messages_url,
                data=payload,
                auth=(self.account_sid, self.auth_token)
            )

    async def send_template(self, to_e164: str, content_sid: str, variables: Dict[str, str]) -> str:
        """
        Send a WhatsApp Content template

        Args:
            to_e164: Recipient in E.164 (with or without 'whatsapp:' prefix)
            content_sid: Twilio Content template SID (HX...)
            variables: Template variables keyed "1", "2", ...

        Returns:
            Twilio message SID

        Raises:
            MessagingConfigurationError: If the client is not configured
            MessagingUnavailableError: If Twilio could not be reached
            MessagingError: If Twilio rejected the message
        """
        payload = self.build_payload(to_e164, content_sid, variables)
        try:
            response = await self._post(payload)
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            raise MessagingUnavailableError(f"Twilio unavailable: {e}") from e

        if response.status_code in (200, 201):
            sid = response.json().get("sid")
            logger.info("WhatsApp message queued: %s", sid)
            return sid

        try:
            detail = response.json().get("message", response.text)
        except ValueError:
            detail = response.text
        raise MessagingError(f"Twilio rejected message ({response.status_code}): {detail}")
