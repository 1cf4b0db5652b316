import asyncio
import json

import httpx

from src.services.notifications import WebhookNotifier

WEBHOOK_URL = "http://notify.test/hook"


def notifier_for(handler) -> WebhookNotifier:
    return WebhookNotifier(WEBHOOK_URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def test_without_webhook_nothing_is_sent():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async def scenario():
        notifier = WebhookNotifier(None, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        notifier.notify("soft", "hello")
        await notifier.aclose()

    asyncio.run(scenario())


def test_notify_returns_before_delivery():
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append((str(request.url), json.loads(request.content)))
        return httpx.Response(204)

    async def scenario():
        notifier = notifier_for(handler)
        notifier.notify("limit", "That's all for today")
        # Nothing has gone out yet, the send only runs once the caller yields to the loop
        assert sent == []
        await notifier.aclose()

    asyncio.run(scenario())

    assert sent == [(WEBHOOK_URL, {"kind": "limit", "message": "That's all for today"})]


def test_delivery_errors_are_swallowed():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        notifier = notifier_for(handler)
        notifier.notify("limit", "That's all for today")
        await notifier.aclose()

    asyncio.run(scenario())


def test_error_status_is_not_raised():
    async def scenario():
        notifier = notifier_for(lambda request: httpx.Response(503))
        notifier.notify("soft", "hello")
        await notifier.aclose()

    asyncio.run(scenario())


def test_outside_an_event_loop_the_notice_is_dropped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    notifier = notifier_for(handler)
    notifier.notify("soft", "hello")

    asyncio.run(notifier.aclose())
