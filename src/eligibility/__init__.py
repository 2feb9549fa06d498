"""Eligibility engine — rule-based plan matching against a client profile."""

from src.eligibility.engine import evaluate_plans, is_eligible, match_plans
from src.eligibility.rules import RULE_CHECKS
from src.schemas.plans import (
    ClientProfile,
    DependentProfile,
    InsurancePlan,
    PlanMatchResult,
    RuleCheck,
)

__all__ = [
    "match_plans",
    "evaluate_plans",
    "is_eligible",
    "RULE_CHECKS",
    "ClientProfile",
    "DependentProfile",
    "InsurancePlan",
    "PlanMatchResult",
    "RuleCheck",
]
