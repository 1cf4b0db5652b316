import asyncio
import json

import httpx
import pytest

from src.exceptions import GenerationFailed, UpstreamPaymentRequired, UpstreamRateLimited
from src.interfaces.agent import AutonomyMode, ConversationContext
from src.interfaces.credits import CreditAction
from src.services.generation import GenerationClient


def generate(handler, message_router) -> str:
    client = GenerationClient(
        base_url="http://generation.test/",
        api_key="secret",
        timeout=5,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    matches = message_router.route_message("plan my gym week")
    return asyncio.run(
        client.generate(
            "plan my gym week", matches, ConversationContext(), AutonomyMode.predict_confirm, CreditAction.normal_chat
        )
    )


def test_reply_is_returned(message_router):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["authorization"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"reply": "Here is your week."})

    assert generate(handler, message_router) == "Here is your week."
    assert seen["url"] == "http://generation.test/v1/generate"
    assert seen["authorization"] == "Bearer secret"
    assert seen["body"]["mode"] == "predict_confirm"
    assert seen["body"]["action"] == "normal_chat"
    assert [domain["domain_id"] for domain in seen["body"]["domains"]] == ["planner", "fitness"]


@pytest.mark.parametrize(
    "status_code, error",
    [(429, UpstreamRateLimited), (402, UpstreamPaymentRequired), (500, GenerationFailed), (400, GenerationFailed)],
)
def test_error_statuses(message_router, status_code, error):
    with pytest.raises(error):
        generate(lambda request: httpx.Response(status_code, text="nope"), message_router)


def test_malformed_body(message_router):
    with pytest.raises(GenerationFailed):
        generate(lambda request: httpx.Response(200, json={"text": "missing reply"}), message_router)


def test_transport_error(message_router):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GenerationFailed):
        generate(handler, message_router)
