"""Mock lookups for researchers, publications and clinical trials.

Results come from the static catalogues below, filtered by a case-insensitive
substring match on a primary field (name/title) or a secondary field
(specialty, interests, abstract, description, condition). An empty query returns
the whole catalogue in order. Disease and location hints are accepted for
interface parity with a real index but do not change the result.
"""

import asyncio
import logging
from typing import Iterable, List, Optional

from . import config
from .schemas import ClinicalTrial, Publication, Researcher

LOGGER = logging.getLogger("curalink.search")

RESEARCHERS: tuple[Researcher, ...] = (
    Researcher(
        id="1",
        name="Dr. Alfonso Fasano",
        institution="Toronto Western Hospital",
        specialty="Movement Disorders",
        location="Toronto, Canada",
        match_score=95,
        publications=234,
        research_interests=("Deep Brain Stimulation", "Parkinson's Disease", "Movement Disorders"),
    ),
    Researcher(
        id="2",
        name="Dr. Renato Munhoz",
        institution="Toronto Western Hospital",
        specialty="Parkinson's Disease",
        location="Toronto, Canada",
        match_score=92,
        publications=189,
        research_interests=("Parkinson's Disease", "Neurology", "Clinical Trials"),
    ),
    Researcher(
        id="3",
        name="Dr. Anthony Lang",
        institution="Toronto Western Hospital",
        specialty="Neurology",
        location="Toronto, Canada",
        match_score=88,
        publications=412,
        research_interests=("Movement Disorders", "Neurodegenerative Diseases"),
    ),
)

PUBLICATIONS: tuple[Publication, ...] = (
    Publication(
        id="1",
        title="Advances in Deep Brain Stimulation for Parkinson's Disease: A Comprehensive Review",
        authors="Fasano A, Lang AE, et al.",
        journal="Nature Neuroscience",
        date="2025-01",
        abstract=(
            "This comprehensive review examines recent advances in deep brain stimulation "
            "techniques for Parkinson's disease treatment..."
        ),
        url="https://scholar.google.com",
    ),
    Publication(
        id="2",
        title="Long-term Outcomes of Movement Disorder Treatment in Clinical Practice",
        authors="Munhoz RP, Teive HA, et al.",
        journal="The Lancet Neurology",
        date="2024-12",
        abstract=(
            "A longitudinal study examining the long-term efficacy and safety of various "
            "movement disorder treatments..."
        ),
        url="https://scholar.google.com",
    ),
    Publication(
        id="3",
        title="Stem Cell Therapy in Parkinson's Disease: Current State and Future Directions",
        authors="Lang AE, Kalia LV, et al.",
        journal="Cell Stem Cell",
        date="2024-11",
        abstract=(
            "An overview of current stem cell therapy approaches for Parkinson's disease and "
            "potential future developments..."
        ),
        url="https://scholar.google.com",
    ),
)

CLINICAL_TRIALS: tuple[ClinicalTrial, ...] = (
    ClinicalTrial(
        id="NCT05123456",
        title="Deep Brain Stimulation for Advanced Parkinson's Disease",
        status="Recruiting",
        phase="Phase 3",
        location="Toronto, Canada",
        condition="Parkinson's Disease",
        description=(
            "This study evaluates the efficacy of deep brain stimulation in patients with "
            "advanced Parkinson's disease who have motor fluctuations."
        ),
        eligibility="Ages 18-75, diagnosed with Parkinson's disease for at least 5 years",
        url="https://clinicaltrials.gov",
    ),
    ClinicalTrial(
        id="NCT05123457",
        title="Novel Immunotherapy for Multiple System Atrophy",
        status="Recruiting",
        phase="Phase 2",
        location="Toronto, Canada",
        condition="Multiple System Atrophy",
        description="A clinical trial investigating a new immunotherapy approach for treating multiple system atrophy.",
        eligibility="Ages 40-80, diagnosed with MSA within the last 3 years",
        url="https://clinicaltrials.gov",
    ),
    ClinicalTrial(
        id="NCT05123458",
        title="Freezing of Gait Treatment Study in Parkinson's Patients",
        status="Active, not recruiting",
        phase="Phase 2",
        location="Toronto, Canada",
        condition="Parkinson's Disease",
        description="Examining novel therapeutic approaches for freezing of gait in Parkinson's disease patients.",
        eligibility="Ages 50-85, experiencing freezing of gait episodes",
        url="https://clinicaltrials.gov",
    ),
)


def _matches(query: str, fields: Iterable[Optional[str]]) -> bool:
    if query == "":
        return True
    needle = query.lower()
    return any(field and needle in field.lower() for field in fields)


async def _simulate_latency(delay: float | None) -> None:
    await asyncio.sleep(config.SEARCH_DELAY if delay is None else delay)


async def search_researchers(
    query: str = "",
    disease: str | None = None,
    location: str | None = None,
    *,
    delay: float | None = None,
) -> List[Researcher]:
    await _simulate_latency(delay)
    results = [r for r in RESEARCHERS if _matches(query, (r.name, r.specialty, *r.research_interests))]
    LOGGER.debug("researchers query=%r disease=%r location=%r -> %d", query, disease, location, len(results))
    return results


async def search_publications(
    query: str = "",
    disease: str | None = None,
    *,
    delay: float | None = None,
) -> List[Publication]:
    await _simulate_latency(delay)
    results = [p for p in PUBLICATIONS if _matches(query, (p.title, p.abstract))]
    LOGGER.debug("publications query=%r disease=%r -> %d", query, disease, len(results))
    return results


async def search_clinical_trials(
    query: str = "",
    location: str | None = None,
    *,
    delay: float | None = None,
) -> List[ClinicalTrial]:
    await _simulate_latency(delay)
    results = [t for t in CLINICAL_TRIALS if _matches(query, (t.title, t.description, t.condition))]
    LOGGER.debug("trials query=%r location=%r -> %d", query, location, len(results))
    return results


def get_researcher(researcher_id: str) -> Researcher | None:
    return next((r for r in RESEARCHERS if r.id == researcher_id), None)


def get_publication(publication_id: str) -> Publication | None:
    return next((p for p in PUBLICATIONS if p.id == publication_id), None)


def get_trial(trial_id: str) -> ClinicalTrial | None:
    return next((t for t in CLINICAL_TRIALS if t.id == trial_id), None)
