"""Profile builder — turns an intake submission into a ClientProfile.

Standard checkbox selections and free-text custom entries are merged into
one list per category before matching and before saving.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.schemas.intake import DependentSubmission, IntakeSubmission
from src.schemas.plans import ClientProfile, DependentProfile


def merge_selections(standard: Iterable[str], custom: Iterable[str]) -> list[str]:
    """Standard selections followed by custom entries.

    Entries are stripped, blanks dropped and duplicates removed keeping the
    first occurrence. Case is preserved: matching is case-sensitive.
    """
    merged: dict[str, None] = {}
    for name in (*standard, *custom):
        cleaned = name.strip()
        if cleaned:
            merged.setdefault(cleaned, None)
    return list(merged)


def merged_conditions(entry: IntakeSubmission | DependentSubmission) -> list[str]:
    return merge_selections(entry.health_conditions, entry.custom_health_conditions)


def merged_medications(entry: IntakeSubmission | DependentSubmission) -> list[str]:
    return merge_selections(entry.medications, entry.custom_medications)


def build_client_profile(submission: IntakeSubmission) -> ClientProfile:
    """Build the matcher input for the primary applicant and their dependents."""
    dependents = tuple(
        DependentProfile(
            relationship=dep.relationship,
            health_conditions=frozenset(merged_conditions(dep)),
            medications=frozenset(merged_medications(dep)),
        )
        for dep in submission.dependents
    )
    return ClientProfile(
        state=submission.state,
        health_conditions=frozenset(merged_conditions(submission)),
        medications=frozenset(merged_medications(submission)),
        dependents=dependents,
    )
