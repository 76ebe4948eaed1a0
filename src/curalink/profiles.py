"""Onboarding and profile forms for patients and researchers."""

import logging
from typing import Any, Dict, Union

from pydantic import ValidationError

from .schemas import PatientProfile, ResearcherProfile
from .storage import KeyValueStore, read_json, write_json

LOGGER = logging.getLogger("curalink.profiles")

USER_TYPE_KEY = "userType"
PROFILE_KEYS = {"patient": "patientData", "researcher": "researcherData"}
PROFILE_MODELS = {"patient": PatientProfile, "researcher": ResearcherProfile}
REQUIRED_FIELDS = {
    "patient": ("name", "disease", "location"),
    "researcher": ("name", "institution", "specialties", "research_interests", "location"),
}

Profile = Union[PatientProfile, ResearcherProfile]


class IncompleteFormError(ValueError):
    def __init__(self, missing):
        self.missing = tuple(missing)
        super().__init__(f"Please fill in all required fields: {', '.join(self.missing)}")


class AccountRequiredError(RuntimeError):
    pass


def _validate(account_type: str, data: Dict[str, Any]) -> Profile:
    if account_type not in PROFILE_MODELS:
        raise ValueError(f"Unknown account type: {account_type!r}")
    profile = PROFILE_MODELS[account_type].model_validate(
        {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}
    )
    missing = [name for name in REQUIRED_FIELDS[account_type] if not getattr(profile, name)]
    if missing:
        raise IncompleteFormError(missing)
    return profile


def _save(store: KeyValueStore, account_type: str, profile: Profile) -> None:
    write_json(store, PROFILE_KEYS[account_type], profile.model_dump(by_alias=True))


def onboard(store: KeyValueStore, account_type: str, data: Dict[str, Any]) -> Profile:
    """Validate the onboarding form, then record the account type and profile.

    Nothing is written when a required field is missing.
    """
    profile = _validate(account_type, data)
    previous = get_account_type(store)
    store.set(USER_TYPE_KEY, account_type)
    _save(store, account_type, profile)
    if previous and previous != account_type:
        LOGGER.info("Account type changed from %s to %s", previous, account_type)
    return profile


def onboard_patient(store: KeyValueStore, data: Dict[str, Any]) -> PatientProfile:
    return onboard(store, "patient", data)


def onboard_researcher(store: KeyValueStore, data: Dict[str, Any]) -> ResearcherProfile:
    return onboard(store, "researcher", data)


def get_account_type(store: KeyValueStore) -> str | None:
    value = store.get(USER_TYPE_KEY)
    return value if value in PROFILE_KEYS else None


def require_account(store: KeyValueStore, account_type: str | None = None) -> str:
    """Return the current account type, or raise if there is none (or the wrong one)."""
    current = get_account_type(store)
    if current is None or (account_type is not None and current != account_type):
        raise AccountRequiredError(
            f"This page needs a {account_type or 'patient or researcher'} account. Run onboarding first."
        )
    return current


def load_profile(store: KeyValueStore) -> Profile | None:
    account_type = get_account_type(store)
    if account_type is None:
        return None
    raw = read_json(store, PROFILE_KEYS[account_type])
    if not raw:
        return None
    try:
        return PROFILE_MODELS[account_type].model_validate(raw)
    except ValidationError:
        LOGGER.warning("Ignoring unreadable %s profile in %s", account_type, PROFILE_KEYS[account_type])
        return None


def update_profile(store: KeyValueStore, changes: Dict[str, Any]) -> Profile:
    """Merge ``changes`` into the stored profile and save it under the same rules as onboarding."""
    account_type = require_account(store)
    current = load_profile(store)
    merged = current.model_dump() if current else {}
    merged.update({k: v for k, v in changes.items() if v is not None})
    profile = _validate(account_type, merged)
    _save(store, account_type, profile)
    return profile


def logout(preferences: KeyValueStore, session: KeyValueStore) -> None:
    preferences.clear()
    session.clear()
