from __future__ import annotations

import asyncio
import json

import httpx

from app.intelligence.models import ReplyCategory, ReplySource
from app.intelligence.reply_templates import CRISIS_REPLY
from app.intelligence.triage import fallback_reply
from app.services.completion_client import CompletionClient
from app.services.reply_engine import SupportiveReplyEngine


def _client(handler) -> CompletionClient:  # type: ignore[no-untyped-def]
    return CompletionClient(
        enabled=True,
        base_url="http://127.0.0.1:8788",
        timeout_sec=1.0,
        transport=httpx.MockTransport(handler),
    )


def _completion_body(content: str) -> dict[str, object]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_engine_without_client_uses_fallback() -> None:
    engine = SupportiveReplyEngine()

    result = asyncio.run(engine.generate_reply("hello"))

    assert result.source == ReplySource.FALLBACK
    assert result.category == ReplyCategory.GREETING
    assert result.reply == fallback_reply("hello")
    assert result.ai_error is None
    assert engine.ai_enabled is False


def test_engine_fallback_is_byte_identical_across_calls() -> None:
    engine = SupportiveReplyEngine(
        completion_client=CompletionClient(enabled=False, base_url="http://127.0.0.1:8788"),
    )

    first = asyncio.run(engine.generate_reply("work deadlines are crushing me"))
    second = asyncio.run(engine.generate_reply("work deadlines are crushing me"))

    assert first.reply == second.reply
    assert first.category == ReplyCategory.STRESS


def test_engine_uses_trimmed_ai_reply() -> None:
    captured: dict[str, object] = {}

    def _handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion_body("  You are not alone.  \n"))

    engine = SupportiveReplyEngine(completion_client=_client(_handler))

    result = asyncio.run(engine.generate_reply("I feel lonely"))

    assert result.source == ReplySource.AI
    assert result.reply == "You are not alone."
    assert result.category == ReplyCategory.LONELINESS
    assert captured["url"] == "http://127.0.0.1:8788/v1/chat/completions"
    body = captured["body"]
    assert isinstance(body, dict)
    assert body["messages"][0]["role"] == "system"
    assert body["messages"][1] == {"role": "user", "content": "I feel lonely"}
    assert body["max_tokens"] == 200
    assert body["temperature"] == 0.7


def test_engine_http_500_falls_back_to_same_reply() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        _ = request
        return httpx.Response(500, json={"error": "upstream down"})

    engine = SupportiveReplyEngine(completion_client=_client(_handler))

    result = asyncio.run(engine.generate_reply("I want to end my life"))

    assert result.source == ReplySource.FALLBACK
    assert result.category == ReplyCategory.CRISIS
    assert result.reply == fallback_reply("I want to end my life")
    assert result.ai_error == "completion_http_status:500"


def test_engine_timeout_falls_back() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    engine = SupportiveReplyEngine(completion_client=_client(_handler))

    result = asyncio.run(engine.generate_reply("I can't sleep and feel exhausted"))

    assert result.source == ReplySource.FALLBACK
    assert result.category == ReplyCategory.SLEEP
    assert result.reply == fallback_reply("I can't sleep and feel exhausted")
    assert result.ai_error == "completion_timeout"


def test_engine_empty_ai_content_falls_back() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        _ = request
        return httpx.Response(200, json=_completion_body("   "))

    engine = SupportiveReplyEngine(completion_client=_client(_handler))

    result = asyncio.run(engine.generate_reply("thank you"))

    assert result.source == ReplySource.FALLBACK
    assert result.reply == fallback_reply("thank you")
    assert result.ai_error == "completion_empty_content"


def test_engine_makes_exactly_one_attempt() -> None:
    calls: list[str] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(503, text="busy")

    engine = SupportiveReplyEngine(completion_client=_client(_handler))

    asyncio.run(engine.generate_reply("I'm so angry"))

    assert len(calls) == 1


def test_engine_ai_crisis_reply_keeps_emergency_resources() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        _ = request
        return httpx.Response(200, json=_completion_body("That sounds hard."))

    engine = SupportiveReplyEngine(completion_client=_client(_handler))

    result = asyncio.run(engine.generate_reply("I want to end my life"))

    assert result.source == ReplySource.AI
    assert result.category == ReplyCategory.CRISIS
    assert result.reply.startswith("That sounds hard.")
    assert result.reply.endswith(CRISIS_REPLY)
    assert "988" in result.reply
    assert "911" in result.reply
