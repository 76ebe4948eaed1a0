"""
Unit tests for the assistant client and chat session
"""

import asyncio
import json

import httpx
import pytest

from curalink.assistant import AssistantClient, ChatSession, fallback_response
from curalink.prompt import (
    CHAT_SYSTEM_PROMPT,
    DEFAULT_FALLBACK,
    GREETING,
    PUBLICATION_SUMMARY_FALLBACK,
    TRIAL_SUMMARY_FALLBACK,
)
from curalink.schemas import ChatMessage

ENDPOINT = "http://proxy.test/v1/chat/completions"


def _completion(text):
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": text}}]}


def _client(handler, api_key="proxy-token"):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AssistantClient(endpoint=ENDPOINT, api_key=api_key, model="test-model", http_client=http)


def test_get_response_sends_system_history_and_message():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=_completion("  Here are some experts.  "))

    client = _client(handler)
    history = [
        ChatMessage(role="assistant", content=GREETING),
        {"role": "user", "content": "hello"},
    ]

    reply = asyncio.run(client.get_response("Find me experts", history))

    assert reply.text == "Here are some experts."
    assert reply.degraded is False
    assert reply.reason is None

    request = calls[0]
    assert request.headers["Authorization"] == "Bearer proxy-token"
    body = json.loads(request.content)
    assert body["model"] == "test-model"
    assert body["max_tokens"] > 0
    assert body["messages"][0] == {"role": "system", "content": CHAT_SYSTEM_PROMPT.strip()}
    assert body["messages"][1:] == [
        {"role": "assistant", "content": GREETING},
        {"role": "user", "content": "hello"},
        {"role": "user", "content": "Find me experts"},
    ]


def test_missing_credentials_falls_back_without_calling():
    def handler(request):  # pragma: no cover - must not be reached
        raise AssertionError("no request expected")

    reply = asyncio.run(_client(handler, api_key="").get_response("Tell me about clinical trials"))

    assert reply.degraded is True
    assert reply.reason == "missing_credentials"
    assert "Clinical Trials page" in reply.text


def test_network_failure_falls_back():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    reply = asyncio.run(_client(handler).get_response("Tell me about clinical trials"))

    assert reply.degraded is True
    assert reply.reason == "network_error"
    assert "Clinical Trials page" in reply.text


def test_non_2xx_falls_back():
    reply = asyncio.run(
        _client(lambda request: httpx.Response(502, json={"detail": "boom"})).get_response("Who are the experts?")
    )
    assert reply.reason == "http_error"
    assert "Health Experts page" in reply.text


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": {}}]}),
        httpx.Response(200, json=_completion("   ")),
        httpx.Response(200, json=[1, 2, 3]),
    ],
)
def test_malformed_response_falls_back(response):
    reply = asyncio.run(_client(lambda request: response).get_response("hi"))
    assert reply.degraded is True
    assert reply.reason == "malformed_response"
    assert reply.text == DEFAULT_FALLBACK


@pytest.mark.parametrize(
    "message,expected",
    [
        ("Tell me about clinical trials", "Clinical Trials page"),
        ("Can you recommend a specialist?", "Health Experts page"),
        ("Any new papers on DBS?", "Publications page"),
        ("Where are my saved items?", "Favorites page"),
        ("Is there a community forum?", "Forum"),
        ("hello there", DEFAULT_FALLBACK),
    ],
)
def test_fallback_keywords(message, expected):
    assert expected in fallback_response(message)


def test_summaries_use_dedicated_prompts_and_caps():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=_completion("Simple summary."))

    client = _client(handler)
    pub = asyncio.run(client.summarize_publication("Complex abstract"))
    trial = asyncio.run(client.summarize_trial("Trial description"))

    assert pub.text == trial.text == "Simple summary."
    assert bodies[0]["max_tokens"] == 150
    assert "Complex abstract" in bodies[0]["messages"][1]["content"]
    assert bodies[1]["max_tokens"] == 120
    assert bodies[1]["messages"][1]["content"] == "Summarize this clinical trial: Trial description"


def test_summary_fallbacks():
    client = _client(lambda request: httpx.Response(500))
    pub = asyncio.run(client.summarize_publication("abstract"))
    trial = asyncio.run(client.summarize_trial("description"))

    assert (pub.text, pub.degraded) == (PUBLICATION_SUMMARY_FALLBACK, True)
    assert (trial.text, trial.degraded) == (TRIAL_SUMMARY_FALLBACK, True)


class TestChatSession:

    def test_history_seeded_with_greeting(self, session):
        chat = ChatSession(_client(lambda r: httpx.Response(200, json=_completion("x"))), session)
        assert chat.history == [ChatMessage(role="assistant", content=GREETING)]

    def test_send_appends_turns_and_persists(self, session):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content)["messages"])
            return httpx.Response(200, json=_completion(f"answer {len(seen)}"))

        chat = ChatSession(_client(handler), session)
        first = asyncio.run(chat.send("first question"))
        second = asyncio.run(chat.send("second question"))

        assert (first.text, second.text) == ("answer 1", "answer 2")
        assert [m.role for m in chat.history] == ["assistant", "user", "assistant", "user", "assistant"]
        # The second request carries the whole prior conversation.
        assert [m["content"] for m in seen[1][1:]] == [
            GREETING,
            "first question",
            "answer 1",
            "second question",
        ]

        reopened = ChatSession(chat.client, session)
        assert reopened.history == chat.history

    def test_blank_message_ignored(self, session):
        chat = ChatSession(_client(lambda r: httpx.Response(200, json=_completion("x"))), session)
        assert asyncio.run(chat.send("   ")) is None
        assert session.get("chatMessages") is None

    def test_degraded_reply_still_recorded(self, session):
        chat = ChatSession(_client(lambda r: httpx.Response(503)), session)
        reply = asyncio.run(chat.send("Tell me about clinical trials"))

        assert reply.degraded
        assert chat.history[-1].content == reply.text

    def test_reset_and_separate_keys(self, session):
        client = _client(lambda r: httpx.Response(200, json=_completion("ok")))
        chat = ChatSession(client, session)
        other = ChatSession(client, session, key="voiceAgentMessages")
        asyncio.run(chat.send("hi"))

        assert len(other.history) == 1
        chat.reset()
        assert chat.history == [ChatMessage(role="assistant", content=GREETING)]
