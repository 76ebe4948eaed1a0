"""Client for the chat-completion endpoint behind the CuraLink assistant.

The client talks to the credential proxy (``curalink.api.server``) using the
common ``choices[0].message.content`` wire shape. It never raises for remote
failures: a failed or skipped call produces an ``AssistantReply`` flagged as
degraded, carrying keyword-selected help text and the reason.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

import httpx

from . import config
from .prompt import (
    CHAT_SYSTEM_PROMPT,
    DEFAULT_FALLBACK,
    FALLBACK_RESPONSES,
    GREETING,
    PUBLICATION_SUMMARY_FALLBACK,
    PUBLICATION_SUMMARY_PROMPT,
    TRIAL_SUMMARY_FALLBACK,
    TRIAL_SUMMARY_PROMPT,
)
from .schemas import AssistantReply, ChatMessage
from .storage import KeyValueStore, read_json, write_json

LOGGER = logging.getLogger("curalink.assistant")

CHAT_MAX_TOKENS = 500
PUBLICATION_SUMMARY_MAX_TOKENS = 150
TRIAL_SUMMARY_MAX_TOKENS = 120


class AssistantUnavailable(Exception):
    """Raised internally when the remote call cannot produce text."""

    def __init__(self, reason: str, detail: str = ""):
        super().__init__(detail or reason)
        self.reason = reason


def fallback_response(message: str) -> str:
    """Pick canned help text by keyword; the first matching group wins."""
    lowered = message.lower()
    for keywords, response in FALLBACK_RESPONSES:
        if any(keyword in lowered for keyword in keywords):
            return response
    return DEFAULT_FALLBACK


def _as_wire(history: Sequence[ChatMessage | Dict[str, Any]]) -> List[Dict[str, str]]:
    messages = []
    for item in history:
        msg = item if isinstance(item, ChatMessage) else ChatMessage.model_validate(item)
        messages.append({"role": msg.role, "content": msg.content})
    return messages


class AssistantClient:
    def __init__(
        self,
        endpoint: str = config.ASSISTANT_URL,
        api_key: str = config.ASSISTANT_KEY,
        model: str = config.ASSISTANT_MODEL,
        timeout: float = config.ASSISTANT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.endpoint = endpoint
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._http = http_client

    def _headers(self) -> dict:
        return {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}

    async def _post(self, body: dict) -> httpx.Response:
        if self._http is not None:
            return await self._http.post(self.endpoint, json=body, headers=self._headers(), timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as http:
            return await http.post(self.endpoint, json=body, headers=self._headers())

    async def complete(self, messages: List[Dict[str, str]], max_tokens: int) -> str:
        """Send one chat-completion request and return the generated text."""
        if not self.api_key or not self.endpoint:
            raise AssistantUnavailable("missing_credentials", "assistant endpoint or key not configured")

        body = {"model": self.model, "messages": messages, "max_tokens": max_tokens}
        try:
            response = await self._post(body)
        except httpx.HTTPError as exc:
            raise AssistantUnavailable("network_error", str(exc)) from exc

        if response.status_code // 100 != 2:
            raise AssistantUnavailable("http_error", f"status {response.status_code}")

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise AssistantUnavailable("malformed_response", repr(exc)) from exc
        if not isinstance(content, str) or not content.strip():
            raise AssistantUnavailable("malformed_response", "empty content")
        return content.strip()

    async def get_response(
        self, message: str, history: Sequence[ChatMessage | Dict[str, Any]] = ()
    ) -> AssistantReply:
        messages = [{"role": "system", "content": CHAT_SYSTEM_PROMPT.strip()}]
        messages.extend(_as_wire(history))
        messages.append({"role": "user", "content": message})
        try:
            text = await self.complete(messages, CHAT_MAX_TOKENS)
        except AssistantUnavailable as exc:
            LOGGER.warning("Assistant degraded (%s): %s", exc.reason, exc)
            return AssistantReply(text=fallback_response(message), degraded=True, reason=exc.reason)
        return AssistantReply(text=text)

    async def _summarize(self, system_prompt: str, user_text: str, max_tokens: int, fallback: str) -> AssistantReply:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_text},
        ]
        try:
            text = await self.complete(messages, max_tokens)
        except AssistantUnavailable as exc:
            LOGGER.warning("Summary degraded (%s): %s", exc.reason, exc)
            return AssistantReply(text=fallback, degraded=True, reason=exc.reason)
        return AssistantReply(text=text)

    async def summarize_publication(self, abstract: str) -> AssistantReply:
        return await self._summarize(
            PUBLICATION_SUMMARY_PROMPT,
            f"Simplify this medical research abstract for a patient to understand: {abstract}",
            PUBLICATION_SUMMARY_MAX_TOKENS,
            PUBLICATION_SUMMARY_FALLBACK,
        )

    async def summarize_trial(self, description: str) -> AssistantReply:
        return await self._summarize(
            TRIAL_SUMMARY_PROMPT,
            f"Summarize this clinical trial: {description}",
            TRIAL_SUMMARY_MAX_TOKENS,
            TRIAL_SUMMARY_FALLBACK,
        )


class ChatSession:
    """One assistant widget's conversation, persisted in the session store."""

    def __init__(self, client: AssistantClient, store: KeyValueStore, key: str = "chatMessages"):
        self.client = client
        self.store = store
        self.key = key

    @property
    def history(self) -> List[ChatMessage]:
        saved = read_json(self.store, self.key)
        if not saved:
            return [ChatMessage(role="assistant", content=GREETING)]
        try:
            return [ChatMessage.model_validate(item) for item in saved]
        except (TypeError, ValueError):
            LOGGER.warning("Discarding malformed chat history under %r", self.key)
            return [ChatMessage(role="assistant", content=GREETING)]

    def _save(self, messages: List[ChatMessage]) -> None:
        write_json(self.store, self.key, [m.model_dump() for m in messages])

    async def send(self, message: str) -> AssistantReply | None:
        """Run one turn; blank input is ignored and returns None."""
        text = message.strip()
        if not text:
            return None
        prior = self.history
        messages = prior + [ChatMessage(role="user", content=text)]
        self._save(messages)

        reply = await self.client.get_response(text, prior)
        messages.append(ChatMessage(role="assistant", content=reply.text))
        self._save(messages)
        return reply

    def reset(self) -> None:
        self.store.remove(self.key)
