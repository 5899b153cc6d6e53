"""
Tests for the Stripe client against a mocked transport
"""
from urllib.parse import parse_qs

import httpx
import pytest

from bloom.services.payment_service import PaymentError, PaymentService


def _service(handler, secret_key="sk_test_123"):
    return PaymentService(
        secret_key=secret_key,
        api_base="https://stripe.test/v1",
        timeout=2,
        transport=httpx.MockTransport(handler),
    )


async def test_create_payment_intent_sends_cents_and_metadata():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "pi_1", "client_secret": "pi_1_secret"})

    intent = await _service(handler).create_payment_intent(297.0, user_id=7)

    assert intent["client_secret"] == "pi_1_secret"
    request = seen[0]
    assert request.url.path == "/v1/payment_intents"
    assert request.headers["Authorization"] == "Bearer sk_test_123"
    form = parse_qs(request.content.decode())
    assert form["amount"] == ["29700"]
    assert form["currency"] == ["usd"]
    assert form["metadata[userId]"] == ["7"]
    assert form["metadata[service]"] == ["coaching_plan"]


async def test_stripe_error_raises_payment_error():
    def handler(request):
        return httpx.Response(402, json={"error": {"message": "Your card was declined."}})

    with pytest.raises(PaymentError, match="declined"):
        await _service(handler).retrieve_payment_intent("pi_1")


async def test_missing_secret_key_raises():
    service = PaymentService(secret_key=None, transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    service.secret_key = None

    with pytest.raises(PaymentError):
        await service.create_payment_intent(10, user_id=1)
