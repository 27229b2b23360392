"""
SMTP mailer
"""
import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Email could not be handed to the SMTP server"""
    pass


class Mailer:
    """
    SMTP client for transactional email

    Every message is blind-copied to the store mailbox when one is
    configured. Port 465 (or SMTP_SECURE) uses implicit TLS; otherwise
    STARTTLS is negotiated whenever credentials are set.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        secure: bool = False,
        user: Optional[str] = None,
        password: Optional[str] = None,
        sender: str = "Store <no-reply@localhost>",
        bcc: Optional[str] = None,
        timeout: float = 10.0
    ):
        self.host = host
        self.port = port
        self.secure = secure or port == 465
        self.user = user
        self.password = password
        self.sender = sender
        self.bcc = bcc
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "Mailer":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            secure=settings.SMTP_SECURE,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASS,
            sender=settings.SMTP_FROM,
            bcc=settings.ORDER_RECEIVER_EMAIL,
            timeout=settings.SMTP_TIMEOUT,
        )

    def _connect(self) -> smtplib.SMTP:
        if self.secure:
            smtp = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            smtp = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.user:
                if not self.secure:
                    smtp.starttls()
                smtp.login(self.user, self.password or "")
        except Exception:
            smtp.close()
            raise
        return smtp

    def build_message(
        self,
        subject: str,
        html: str,
        text: str,
        to: Optional[str] = None,
        reply_to: Optional[str] = None
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        if to:
            message["To"] = to
        if reply_to:
            message["Reply-To"] = reply_to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(text)
        message.add_alternative(html, subtype="html")
        return message

    def send(
        self,
        subject: str,
        html: str,
        text: str,
        to: Optional[str] = None,
        reply_to: Optional[str] = None
    ) -> str:
        """
        Send a multipart (plain text + HTML) email

        Args:
            subject: Subject line
            html: HTML body
            text: Plain-text body
            to: Primary recipient; when absent only the store copy is sent
            reply_to: Reply-To address

        Returns:
            Message-ID of the sent message

        Raises:
            MailDeliveryError: If there is no recipient or SMTP fails
        """
        recipients = [address for address in (to, self.bcc) if address]
        if not recipients:
            raise MailDeliveryError("No recipient: customer email and store mailbox are both empty")

        message = self.build_message(subject, html, text, to=to, reply_to=reply_to)
        try:
            with self._connect() as smtp:
                smtp.send_message(message, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(f"SMTP delivery failed: {e}") from e

        logger.info("Email sent: %s (%s)", subject, message["Message-ID"])
        return message["Message-ID"]
