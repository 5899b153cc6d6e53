"""
Tests for the SendGrid sender against a mocked transport
"""
import json

import httpx

from bloom.services.email_sender import LoggingEmailSender, SendGridEmailSender

API_URL = "https://sendgrid.test/v3/mail/send"


def _sender(handler):
    return SendGridEmailSender("SG.test-key", api_url=API_URL, timeout=2, transport=httpx.MockTransport(handler))


async def test_accepted_message_returns_true():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    ok = await _sender(handler).send("ana@example.com", "coaching@thrivemidlife.com", "Hi", text="plain", html="<p>x</p>")

    assert ok is True
    request = seen[0]
    assert request.headers["Authorization"] == "Bearer SG.test-key"
    body = json.loads(request.content)
    assert body["personalizations"] == [{"to": [{"email": "ana@example.com"}]}]
    assert body["from"] == {"email": "coaching@thrivemidlife.com"}
    assert [c["type"] for c in body["content"]] == ["text/plain", "text/html"]


async def test_provider_error_returns_false():
    ok = await _sender(lambda request: httpx.Response(401, text="bad key")).send("a@b.co", "c@d.co", "Hi", text="x")

    assert ok is False


async def test_transport_error_returns_false():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    ok = await _sender(handler).send("a@b.co", "c@d.co", "Hi", text="x")

    assert ok is False


async def test_logging_sender_always_succeeds():
    assert await LoggingEmailSender().send("a@b.co", "c@d.co", "Hi") is True
