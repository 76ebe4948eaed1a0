"""Pydantic models shared by the search service, favorites, profiles and assistant.

Stored documents use the camelCase field names of the stored JSON; models accept
both the alias and the Python attribute name.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

FavoriteCategory = Literal["researchers", "publications", "trials"]
AccountType = Literal["patient", "researcher"]
Role = Literal["user", "assistant"]

FAVORITE_CATEGORIES: tuple[str, ...] = ("researchers", "publications", "trials")


class Researcher(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    institution: str
    specialty: str
    location: str
    match_score: int | None = Field(default=None, ge=0, le=100, alias="matchScore")
    publications: int | None = None
    research_interests: tuple[str, ...] = Field(default=(), alias="researchInterests")


class Publication(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    authors: str
    journal: str
    date: str
    abstract: str | None = None
    url: str | None = None


class ClinicalTrial(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    status: str
    phase: str
    location: str
    condition: str
    description: str
    eligibility: str | None = None
    url: str | None = None


class FavoritesSet(BaseModel):
    researchers: list[str] = Field(default_factory=list)
    publications: list[str] = Field(default_factory=list)
    trials: list[str] = Field(default_factory=list)

    def ids(self, category: str) -> list[str]:
        if category not in FAVORITE_CATEGORIES:
            raise ValueError(f"Unknown favorites category: {category!r}")
        return getattr(self, category)


class ChatMessage(BaseModel):
    role: Role
    content: str


class AssistantReply(BaseModel):
    """Outcome of an assistant call.

    ``degraded`` is True when ``text`` is canned fallback help rather than a
    generated answer; ``reason`` then says why the remote call was skipped or failed.
    """

    text: str
    degraded: bool = False
    reason: Literal["missing_credentials", "network_error", "http_error", "malformed_response"] | None = None


class PatientProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    disease: str = ""
    location: str = ""
    additional_info: str = Field(default="", alias="additionalInfo")


class ResearcherProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    institution: str = ""
    specialties: str = ""
    research_interests: str = Field(default="", alias="researchInterests")
    location: str = ""
    orcid: str = ""


class ForumPost(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    category: str
    author: str
    author_type: AccountType = Field(alias="authorType")
    content: str
    replies: int = 0
    date: str
    tags: str = ""


InteractionKind = Literal["meeting", "message", "collaboration", "nudge"]


class InteractionRequest(BaseModel):
    """A meeting, message, collaboration or invitation sent to a researcher."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    kind: InteractionKind
    researcher_id: str = Field(alias="researcherId")
    researcher_name: str = Field(alias="researcherName")
    sent_on: str = Field(alias="sentOn")
    details: dict[str, str | int] = Field(default_factory=dict)
