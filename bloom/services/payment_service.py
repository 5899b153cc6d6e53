"""
Stripe payments for coaching access
"""
from typing import Any, Dict, Optional

import httpx

from bloom.core.config import get_settings
from bloom.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

COACHING_DESCRIPTION = "ThriveMidlife 6-Week Mind-Body Reset Coaching Program"


class PaymentError(Exception):
    """Raised when Stripe cannot be reached or rejects a request"""


class PaymentService:
    """Thin client over the Stripe PaymentIntents REST API"""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.stripe_secret_key
        self.api_base = (api_base or settings.stripe_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.currency = settings.coaching_currency
        self._transport = transport

    async def _request(self, method: str, path: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.secret_key:
            raise PaymentError("STRIPE_SECRET_KEY is not configured")
        try:
            async with httpx.AsyncClient(
                base_url=self.api_base,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    data=data,
                    headers={"Authorization": f"Bearer {self.secret_key}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Error calling Stripe: {e}", exc_info=True)
            raise PaymentError(str(e)) from e

        body = response.json() if response.content else {}
        if response.status_code >= 400:
            message = body.get("error", {}).get("message") or f"HTTP {response.status_code}"
            logger.error(f"Stripe API error: {response.status_code} - {message}")
            raise PaymentError(message)
        return body

    async def create_payment_intent(self, amount: float, user_id: int) -> Dict[str, Any]:
        """Create an intent for ``amount`` dollars; Stripe expects cents"""
        intent = await self._request("POST", "/payment_intents", data={
            "amount": int(round(amount * 100)),
            "currency": self.currency,
            "metadata[service]": "coaching_plan",
            "metadata[description]": COACHING_DESCRIPTION,
            "metadata[userId]": str(user_id),
        })
        logger.info(
            "Payment intent created",
            extra={"payment_intent_id": intent.get("id"), "user_id": user_id, "amount": amount},
        )
        return intent

    async def retrieve_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/payment_intents/{payment_intent_id}")


def get_payment_service() -> PaymentService:
    return PaymentService()
