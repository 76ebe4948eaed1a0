"""Fire-and-forget webhook notifications for user activity.

Delivery problems are logged and swallowed; the user flow that triggered the
event carries on regardless.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

import httpx

from . import config
from .storage import KeyValueStore

LOGGER = logging.getLogger("curalink.events")

USER_ID_KEY = "userId"


def get_user_id(store: KeyValueStore) -> str:
    """Stable anonymous id for this device, created on first use."""
    user_id = store.get(USER_ID_KEY)
    if not user_id:
        user_id = uuid.uuid4().hex
        store.set(USER_ID_KEY, user_id)
    return user_id


class EventNotifier:
    def __init__(
        self,
        webhook_url: str = config.WEBHOOK_URL,
        user_id: str = "anonymous",
        timeout: float = config.WEBHOOK_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.webhook_url = webhook_url
        self.user_id = user_id
        self.timeout = timeout
        self._http = http_client

    async def send(self, event_type: str, payload: Any) -> None:
        if not self.webhook_url:
            return
        data = {
            "eventType": event_type,
            "payload": payload,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "userId": self.user_id,
        }
        try:
            if self._http is not None:
                response = await self._http.post(self.webhook_url, json=data, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as http:
                    response = await http.post(self.webhook_url, json=data)
        except httpx.HTTPError as exc:
            LOGGER.error("Error sending %s event: %s", event_type, exc)
            return
        if not response.is_success:
            LOGGER.warning("Webhook rejected %s event: %s", event_type, response.status_code)

    async def user_signup(self, user_data: dict) -> None:
        await self.send("user_signup", user_data)

    async def expert_followed(self, expert_id: str, expert_name: str) -> None:
        await self.send("expert_followed", {"expertId": expert_id, "expertName": expert_name})

    async def trial_favorited(self, trial_id: str, trial_title: str) -> None:
        await self.send("trial_favorited", {"trialId": trial_id, "trialTitle": trial_title})

    async def publication_saved(self, publication_id: str, publication_title: str) -> None:
        await self.send(
            "publication_saved", {"publicationId": publication_id, "publicationTitle": publication_title}
        )

    async def search_performed(self, search_type: str, query: str, results_count: int) -> None:
        await self.send("search_performed", {"searchType": search_type, "query": query, "resultsCount": results_count})

    async def ai_chat_message(self, message: str, response: str) -> None:
        await self.send("ai_chat_message", {"message": message, "response": response})

    async def account_type_changed(self, from_type: str, to_type: str) -> None:
        await self.send("account_type_changed", {"fromType": from_type, "toType": to_type})

    async def forum_post_created(self, post_id: str, post_title: str, category: str) -> None:
        await self.send("forum_post_created", {"postId": post_id, "postTitle": post_title, "category": category})

    async def meeting_requested(self, expert_id: str, expert_name: str, request_details: dict) -> None:
        await self.send(
            "meeting_requested", {"expertId": expert_id, "expertName": expert_name, "requestDetails": request_details}
        )
