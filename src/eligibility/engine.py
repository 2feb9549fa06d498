"""Eligibility engine — filters a plan catalog down to a client's matches.

Pure Python orchestrator. No DB access, no LLM calls.
The intake service loads the catalog, builds the ClientProfile and
persists whatever it needs to.

Only the primary applicant is matched; dependents on the profile are
ignored here.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.eligibility.rules import RULE_CHECKS
from src.schemas.plans import ClientProfile, InsurancePlan, PlanMatchResult


def is_eligible(profile: ClientProfile, plan: InsurancePlan) -> bool:
    """True if the plan survives every exclusion rule (stops at the first failure)."""
    return all(check(profile, plan).passed for check in RULE_CHECKS)


def match_plans(profile: ClientProfile, catalog: Iterable[InsurancePlan]) -> list[InsurancePlan]:
    """Return the plans the client qualifies for, in catalog order.

    An empty catalog gives an empty list. Never raises on well-formed input
    and never mutates its arguments.
    """
    return [plan for plan in catalog if is_eligible(profile, plan)]


def evaluate_plans(profile: ClientProfile, catalog: Iterable[InsurancePlan]) -> list[PlanMatchResult]:
    """Evaluate every rule for every plan, keeping catalog order.

    Unlike match_plans this runs all rules so the result can explain
    every reason a plan was excluded; exclusion_reason is the first one.
    """
    results: list[PlanMatchResult] = []
    for plan in catalog:
        checks = [check(profile, plan) for check in RULE_CHECKS]
        failed = next((c for c in checks if not c.passed), None)
        results.append(PlanMatchResult(
            plan=plan,
            eligible=failed is None,
            checks=checks,
            exclusion_reason=failed.description if failed else None,
        ))
    return results
