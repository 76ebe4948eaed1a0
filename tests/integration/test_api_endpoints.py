"""
API tests for the assistant proxy, with the Gemini client replaced by a fake.
"""

from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient
from google.auth import exceptions as google_auth_exceptions

from curalink import config
from curalink.api import server
from curalink.assistant import AssistantClient


class FakeModels:
    def __init__(self, parent):
        self.parent = parent

    def generate_content(self, model, contents, config):
        self.parent.generate_calls.append({"model": model, "contents": contents, "config": config})
        if self.parent.error is not None:
            raise self.parent.error
        return SimpleNamespace(text=self.parent.text)


class FakeClient:
    def __init__(self, text="stub response", error=None):
        self.text = text
        self.error = error
        self.models = FakeModels(self)
        self.generate_calls: list[dict] = []


@pytest.fixture()
def llm(monkeypatch):
    fake = FakeClient()
    monkeypatch.setattr(server, "llm_client", fake)
    monkeypatch.setattr(config, "PROXY_TOKEN", "")
    return fake


@pytest.fixture()
def client(llm):
    return TestClient(server.app)


PAYLOAD = {
    "model": "whatever",
    "max_tokens": 150,
    "messages": [
        {"role": "system", "content": "You are CuraLink AI Assistant."},
        {"role": "assistant", "content": "Hi! How can I help?"},
        {"role": "user", "content": "Tell me about clinical trials"},
    ],
}


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_root_endpoint(client):
    assert "CuraLink" in client.get("/").json()["message"]


def test_chat_completion_shape_and_upstream_call(client, llm):
    response = client.post("/v1/chat/completions", json=PAYLOAD)

    assert response.status_code == 200
    body = response.json()
    assert body["object"] == "chat.completion"
    assert body["choices"][0]["message"] == {"role": "assistant", "content": "stub response"}
    assert body["choices"][0]["finish_reason"] == "stop"

    call = llm.generate_calls[0]
    assert call["model"] == config.GEMINI_MODEL
    assert call["config"]["system_instruction"] == "You are CuraLink AI Assistant."
    assert call["config"]["max_output_tokens"] == 150
    assert call["contents"] == [
        {"role": "model", "parts": [{"text": "Hi! How can I help?"}]},
        {"role": "user", "parts": [{"text": "Tell me about clinical trials"}]},
    ]


def test_token_enforced_when_configured(client, monkeypatch):
    monkeypatch.setattr(config, "PROXY_TOKEN", "s3cret")

    assert client.post("/v1/chat/completions", json=PAYLOAD).status_code == 401
    wrong = client.post("/v1/chat/completions", json=PAYLOAD, headers={"Authorization": "Bearer nope"})
    assert wrong.status_code == 401
    ok = client.post("/v1/chat/completions", json=PAYLOAD, headers={"Authorization": "Bearer s3cret"})
    assert ok.status_code == 200


def test_system_only_request_rejected(client):
    payload = {"messages": [{"role": "system", "content": "rules"}]}
    assert client.post("/v1/chat/completions", json=payload).status_code == 422


def test_upstream_failure_maps_to_502(client, llm):
    llm.error = RuntimeError("quota exceeded")
    response = client.post("/v1/chat/completions", json=PAYLOAD)
    assert response.status_code == 502
    assert "quota exceeded" in response.json()["detail"]


def test_missing_google_credentials_map_to_500(client, llm):
    llm.error = google_auth_exceptions.DefaultCredentialsError("no application default credentials")
    response = client.post("/v1/chat/completions", json=PAYLOAD)
    assert response.status_code == 500
    assert "Google credentials not found" in response.json()["detail"]


def test_empty_upstream_text_maps_to_502(client, llm):
    llm.text = ""
    assert client.post("/v1/chat/completions", json=PAYLOAD).status_code == 502


def test_cors_headers(client):
    response = client.options(
        "/v1/chat/completions",
        headers={"Origin": "http://localhost:8080", "Access-Control-Request-Method": "POST"},
    )
    assert "access-control-allow-origin" in response.headers


def test_assistant_client_round_trip_through_proxy(client, llm):
    """The assistant client speaks to the proxy app over an in-process transport."""
    import asyncio

    llm.text = "The Clinical Trials page lists recruiting studies."
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=server.app), base_url="http://proxy")
    assistant = AssistantClient(endpoint="http://proxy/v1/chat/completions", api_key="any", http_client=http)

    reply = asyncio.run(assistant.get_response("Tell me about clinical trials"))

    assert reply.degraded is False
    assert reply.text == "The Clinical Trials page lists recruiting studies."
    assert llm.generate_calls[-1]["config"]["max_output_tokens"] > 0
