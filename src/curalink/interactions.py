"""Requests a user can send to a researcher: meetings, messages, collaborations
and invitations to join CuraLink.

Each form is checked the same way onboarding is; a missing required field raises
``IncompleteFormError`` and nothing is recorded. Sent requests are kept in the
preference store, newest first.
"""

import logging
import time
from datetime import date, datetime
from typing import Dict, List

from pydantic import ValidationError

from . import search_service
from .profiles import IncompleteFormError
from .schemas import InteractionRequest, Researcher
from .storage import KeyValueStore, read_json, write_json

LOGGER = logging.getLogger("curalink.interactions")

INTERACTIONS_KEY = "interactionRequests"

MEETING_DURATIONS = (15, 30, 45, 60)
DEFAULT_MEETING_DURATION = 30


class InvalidRequestError(ValueError):
    pass


class ResearcherNotFoundError(LookupError):
    pass


def _require(fields: Dict[str, str]) -> Dict[str, str]:
    cleaned = {name: (value or "").strip() for name, value in fields.items()}
    missing = [name for name, value in cleaned.items() if not value]
    if missing:
        raise IncompleteFormError(missing)
    return cleaned


class Interactions:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def history(self) -> List[InteractionRequest]:
        raw = read_json(self.store, INTERACTIONS_KEY, [])
        if not isinstance(raw, list):
            LOGGER.warning("Ignoring %s: expected a list, got %s", INTERACTIONS_KEY, type(raw).__name__)
            return []
        try:
            return [InteractionRequest.model_validate(item) for item in raw]
        except ValidationError:
            LOGGER.warning("Ignoring unreadable requests in %s", INTERACTIONS_KEY)
            return []

    def _researcher(self, researcher_id: str) -> Researcher:
        researcher = search_service.get_researcher(researcher_id)
        if researcher is None:
            raise ResearcherNotFoundError(f"Researcher {researcher_id} not found.")
        return researcher

    def _record(self, kind: str, researcher: Researcher, details: Dict[str, str | int]) -> InteractionRequest:
        request = InteractionRequest(
            id=str(time.time_ns() // 1_000_000),
            kind=kind,
            researcher_id=researcher.id,
            researcher_name=researcher.name,
            sent_on=date.today().isoformat(),
            details=details,
        )
        saved = self.history()
        write_json(self.store, INTERACTIONS_KEY, [r.model_dump(by_alias=True) for r in [request, *saved]])
        LOGGER.info("%s request %s sent to researcher %s", kind, request.id, researcher.id)
        return request

    def request_meeting(
        self,
        researcher_id: str,
        meeting_date: str | None,
        meeting_time: str | None,
        duration: int = DEFAULT_MEETING_DURATION,
        message: str = "",
        today: date | None = None,
    ) -> InteractionRequest:
        """Ask for a meeting on ``meeting_date`` (YYYY-MM-DD) at ``meeting_time`` (HH:MM).

        The date may not be earlier than ``today``.
        """
        researcher = self._researcher(researcher_id)
        fields = _require({"date": meeting_date, "time": meeting_time})
        if duration not in MEETING_DURATIONS:
            raise InvalidRequestError(
                f"Meeting duration must be one of {', '.join(map(str, MEETING_DURATIONS))} minutes."
            )
        try:
            day = date.fromisoformat(fields["date"])
            datetime.strptime(fields["time"], "%H:%M")
        except ValueError as exc:
            raise InvalidRequestError(f"Invalid meeting date or time: {exc}") from exc
        if day < (today or date.today()):
            raise InvalidRequestError("Meeting date cannot be in the past.")
        return self._record(
            "meeting",
            researcher,
            {**fields, "duration": duration, "message": (message or "").strip()},
        )

    def send_message(self, researcher_id: str, subject: str | None, message: str | None) -> InteractionRequest:
        researcher = self._researcher(researcher_id)
        return self._record("message", researcher, _require({"subject": subject, "message": message}))

    def request_collaboration(
        self,
        researcher_id: str,
        project_title: str | None,
        description: str | None,
        expertise: str = "",
    ) -> InteractionRequest:
        researcher = self._researcher(researcher_id)
        fields = _require({"project_title": project_title, "description": description})
        return self._record("collaboration", researcher, {**fields, "expertise": (expertise or "").strip()})

    def send_nudge(self, researcher_id: str, message: str = "") -> InteractionRequest:
        researcher = self._researcher(researcher_id)
        return self._record("nudge", researcher, {"message": (message or "").strip()})
