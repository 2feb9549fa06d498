"""Per-plan exclusion rules.

Each function takes a ClientProfile and an InsurancePlan and returns a
RuleCheck. Pure Python, deterministic, no I/O. Name matching is exact and
case-sensitive; state codes are already upper-cased by the schemas.
"""

from __future__ import annotations

from collections.abc import Callable

from src.schemas.plans import ClientProfile, InsurancePlan, RuleCheck


def _joined(names: frozenset[str]) -> str:
    return ", ".join(sorted(names))


# ── State availability ────────────────────────────────────────────────────


def check_state(profile: ClientProfile, plan: InsurancePlan) -> RuleCheck:
    """Plan must be sold in the client's state.

    Skipped (passes) when the plan has no state list or the client's state
    is unknown.
    """
    if not plan.available_states or profile.state is None:
        return RuleCheck(
            name="state",
            description="Plan is not restricted to the client's state",
            passed=True,
            value=profile.state,
        )

    available = profile.state in plan.available_states
    return RuleCheck(
        name="state",
        description=f"Plan is not available in {profile.state}",
        passed=available,
        value=profile.state,
    )


# ── Health conditions ─────────────────────────────────────────────────────


def check_health_conditions(profile: ClientProfile, plan: InsurancePlan) -> RuleCheck:
    """Client must have none of the plan's disqualifying conditions."""
    overlap = plan.disqualifying_health_conditions & profile.health_conditions
    return RuleCheck(
        name="health_conditions",
        description=(
            f"Disqualifying health condition: {_joined(overlap)}"
            if overlap
            else "No disqualifying health conditions"
        ),
        passed=not overlap,
        value=_joined(overlap) or None,
    )


# ── Medications ───────────────────────────────────────────────────────────


def check_medications(profile: ClientProfile, plan: InsurancePlan) -> RuleCheck:
    """Client must take none of the plan's disqualifying medications."""
    overlap = plan.disqualifying_medications & profile.medications
    return RuleCheck(
        name="medications",
        description=(
            f"Disqualifying medication: {_joined(overlap)}"
            if overlap
            else "No disqualifying medications"
        ),
        passed=not overlap,
        value=_joined(overlap) or None,
    )


# ── Rule registry ─────────────────────────────────────────────────────────

# Evaluated in this order; the cheapest check goes first so match_plans can
# short-circuit. Order never changes which plans survive.
RULE_CHECKS: tuple[Callable[[ClientProfile, InsurancePlan], RuleCheck], ...] = (
    check_state,
    check_health_conditions,
    check_medications,
)
