from typing import Sequence

from .schemas import ClinicalTrial, Publication, Researcher

REPORT_TITLE = "CuraLink - Medical Research Summary"
RULE = "=" * 50
DEFAULT_REPORT_NAME = "medical-research-summary.txt"


def build_summary_report(
    researchers: Sequence[Researcher] = (),
    publications: Sequence[Publication] = (),
    trials: Sequence[ClinicalTrial] = (),
) -> str:
    """Plain-text summary of selected favorites for a patient to bring to their doctor."""
    summary = f"{REPORT_TITLE}\n\n"

    if researchers:
        summary += f"HEALTH EXPERTS\n{RULE}\n\n"
        for r in researchers:
            summary += f"{r.name}\n"
            summary += f"Institution: {r.institution}\n"
            summary += f"Specialty: {r.specialty}\n"
            summary += f"Location: {r.location}\n\n"

    if publications:
        summary += f"\nRELEVANT PUBLICATIONS\n{RULE}\n\n"
        for p in publications:
            summary += f"{p.title}\n"
            summary += f"{p.authors}\n"
            summary += f"{p.journal}, {p.date}\n\n"

    if trials:
        summary += f"\nCLINICAL TRIALS\n{RULE}\n\n"
        for t in trials:
            summary += f"{t.title}\n"
            summary += f"ID: {t.id}\n"
            summary += f"Status: {t.status} | Phase: {t.phase}\n"
            summary += f"Location: {t.location}\n\n"

    return summary
