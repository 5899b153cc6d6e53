"""
Outbound email delivery
"""
import time
from typing import List, Optional

import httpx

from bloom.core.config import get_settings
from bloom.core.logging_config import LoggingConfig
from bloom.core.metrics import email_send_duration_seconds

logger = LoggingConfig.get_logger(__name__)


class EmailSender:
    """
    Interface for email providers.

    ``send`` reports success as a bool and never raises for provider errors.
    """

    async def send(
        self,
        to: str,
        from_: str,
        subject: str,
        text: Optional[str] = None,
        html: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError


class SendGridEmailSender(EmailSender):
    """Sends through the SendGrid v3 mail/send endpoint"""

    def __init__(
        self,
        api_key: str,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.api_key = api_key
        self.api_url = api_url or settings.sendgrid_api_url
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    def _payload(self, to: str, from_: str, subject: str, text: Optional[str], html: Optional[str]) -> dict:
        content: List[dict] = []
        if text:
            content.append({"type": "text/plain", "value": text})
        if html:
            content.append({"type": "text/html", "value": html})
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": from_},
            "subject": subject,
            "content": content,
        }

    async def send(
        self,
        to: str,
        from_: str,
        subject: str,
        text: Optional[str] = None,
        html: Optional[str] = None,
    ) -> bool:
        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.api_url,
                    json=self._payload(to, from_, subject, text, html),
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )

            if response.status_code in (200, 202):
                logger.info("Email sent", extra={"to": to, "subject": subject})
                return True

            logger.error(
                f"SendGrid API error: {response.status_code} - {response.text}",
                extra={"to": to, "subject": subject, "status_code": response.status_code},
            )
            return False

        except httpx.HTTPError as e:
            logger.error(
                f"SendGrid email error: {e}",
                exc_info=True,
                extra={"to": to, "subject": subject},
            )
            return False
        finally:
            email_send_duration_seconds.observe(time.time() - start_time)


class LoggingEmailSender(EmailSender):
    """Logs instead of sending; used when no provider key is configured"""

    async def send(
        self,
        to: str,
        from_: str,
        subject: str,
        text: Optional[str] = None,
        html: Optional[str] = None,
    ) -> bool:
        logger.info(
            "Email delivery disabled, message logged only",
            extra={"to": to, "from": from_, "subject": subject},
        )
        return True


_sender: Optional[EmailSender] = None


def get_email_sender() -> EmailSender:
    """Process-wide sender chosen from settings"""
    global _sender
    if _sender is None:
        settings = get_settings()
        if settings.sendgrid_api_key:
            _sender = SendGridEmailSender(settings.sendgrid_api_key)
        else:
            logger.warning("SENDGRID_API_KEY not set, emails will only be logged")
            _sender = LoggingEmailSender()
    return _sender
