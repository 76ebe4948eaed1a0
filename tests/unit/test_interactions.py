"""
Unit tests for requests sent to researchers
"""

from datetime import date, timedelta

import pytest

from curalink.interactions import (
    DEFAULT_MEETING_DURATION,
    Interactions,
    InvalidRequestError,
    ResearcherNotFoundError,
)
from curalink.profiles import IncompleteFormError

TODAY = date(2026, 3, 10)


@pytest.fixture()
def interactions(preferences):
    return Interactions(preferences)


# ----------------------------------------------------------------------
# Meetings
# ----------------------------------------------------------------------


class TestMeetingRequest:
    def test_defaults_to_thirty_minutes(self, interactions):
        request = interactions.request_meeting("1", "2026-03-12", "14:30", today=TODAY)

        assert request.kind == "meeting"
        assert request.researcher_name == "Dr. Alfonso Fasano"
        assert request.details == {
            "date": "2026-03-12",
            "time": "14:30",
            "duration": DEFAULT_MEETING_DURATION,
            "message": "",
        }

    def test_date_and_time_required(self, interactions):
        with pytest.raises(IncompleteFormError) as excinfo:
            interactions.request_meeting("1", "", None, today=TODAY)
        assert excinfo.value.missing == ("date", "time")
        assert interactions.history() == []

    @pytest.mark.parametrize("duration", [15, 45, 60])
    def test_allowed_durations(self, interactions, duration):
        request = interactions.request_meeting("2", "2026-03-10", "09:00", duration, today=TODAY)
        assert request.details["duration"] == duration

    def test_other_durations_rejected(self, interactions):
        with pytest.raises(InvalidRequestError):
            interactions.request_meeting("2", "2026-03-11", "09:00", 20, today=TODAY)

    def test_past_date_rejected(self, interactions):
        yesterday = (TODAY - timedelta(days=1)).isoformat()
        with pytest.raises(InvalidRequestError, match="past"):
            interactions.request_meeting("2", yesterday, "09:00", today=TODAY)

    @pytest.mark.parametrize("day, hour", [("12/03/2026", "09:00"), ("2026-03-12", "9am")])
    def test_malformed_date_or_time_rejected(self, interactions, day, hour):
        with pytest.raises(InvalidRequestError):
            interactions.request_meeting("2", day, hour, today=TODAY)


# ----------------------------------------------------------------------
# Messages, collaborations, invitations
# ----------------------------------------------------------------------


def test_message_requires_subject_and_body(interactions):
    with pytest.raises(IncompleteFormError) as excinfo:
        interactions.send_message("3", "Question", "   ")
    assert excinfo.value.missing == ("message",)

    request = interactions.send_message("3", " Question ", "Is your trial recruiting?")
    assert request.details == {"subject": "Question", "message": "Is your trial recruiting?"}


def test_collaboration_requires_title_and_description(interactions):
    with pytest.raises(IncompleteFormError) as excinfo:
        interactions.request_collaboration("1", "", "")
    assert excinfo.value.missing == ("project_title", "description")

    request = interactions.request_collaboration("1", "Gait study", "Wearable sensors for FOG.")
    assert request.details["expertise"] == ""


def test_nudge_needs_no_fields(interactions):
    request = interactions.send_nudge("2")
    assert request.kind == "nudge"
    assert request.details == {"message": ""}


def test_unknown_researcher(interactions):
    with pytest.raises(ResearcherNotFoundError):
        interactions.send_nudge("42")


def test_history_is_newest_first_and_persisted(preferences):
    first = Interactions(preferences).send_message("1", "Hi", "Hello")
    second = Interactions(preferences).send_nudge("3", "Join us")

    assert Interactions(preferences).history() == [second, first]
    assert "researcherId" in preferences.get("interactionRequests")


def test_unreadable_history_is_ignored(preferences, caplog):
    preferences.set("interactionRequests", '{"oops": 1}')
    with caplog.at_level("WARNING", logger="curalink.interactions"):
        assert Interactions(preferences).history() == []
    assert "interactionRequests" in caplog.text
