"""Pydantic schemas for the plan catalog and the eligibility matcher.

Pure data classes — no DB dependencies, no LLM dependencies.
Every restriction list is a frozenset, so membership checks don't depend
on the order the catalog or the intake form supplied them in.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from src.models.enums import Relationship


def _normalize_state(value: str) -> str:
    return value.strip().upper()


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class InsurancePlan(BaseModel):
    """A single insurance product offering with its eligibility restrictions.

    Empty sets mean "no restriction": a plan with no state list and no
    disqualifying conditions or medications matches every client.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    company_name: str
    product_name: str
    product_category: str
    monthly_price: Decimal = Field(ge=0)
    benefits_description: str = ""

    available_states: frozenset[str] = Field(default_factory=frozenset)
    disqualifying_health_conditions: frozenset[str] = Field(default_factory=frozenset)
    disqualifying_medications: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("available_states", mode="before")
    @classmethod
    def normalize_states(cls, v: Any) -> Any:
        """Treat NULL as unrestricted and upper-case state codes.

        A bare string is one state code, not a sequence of letters.
        """
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = [v]
        return frozenset(_normalize_state(s) for s in v if s and s.strip())

    @field_validator("disqualifying_health_conditions", "disqualifying_medications", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        """NULL arrays mean no disqualifiers; a bare string is a single name."""
        if v is None:
            return frozenset()
        if isinstance(v, str):
            return frozenset({v})
        return v

    @field_serializer("available_states", "disqualifying_health_conditions", "disqualifying_medications")
    def serialize_sorted(self, v: frozenset[str]) -> list[str]:
        return sorted(v)


# ---------------------------------------------------------------------------
# Client profile
# ---------------------------------------------------------------------------


class DependentProfile(BaseModel):
    """Health profile of a dependent. Persisted with the client, never matched."""

    model_config = ConfigDict(frozen=True)

    relationship: Relationship = Relationship.OTHER
    health_conditions: frozenset[str] = Field(default_factory=frozenset)
    medications: frozenset[str] = Field(default_factory=frozenset)


class ClientProfile(BaseModel):
    """Merged health and location profile of the primary applicant.

    Built from a single intake submission (standard selections unioned with
    custom entries). A missing state means "unknown" and disables the
    state check.
    """

    model_config = ConfigDict(frozen=True)

    state: str | None = None
    health_conditions: frozenset[str] = Field(default_factory=frozenset)
    medications: frozenset[str] = Field(default_factory=frozenset)
    dependents: tuple[DependentProfile, ...] = ()

    @field_validator("state", mode="before")
    @classmethod
    def normalize_state(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        if isinstance(v, str):
            return _normalize_state(v)
        return v

    @model_validator(mode="after")
    def at_most_one_spouse(self) -> ClientProfile:
        spouses = sum(1 for d in self.dependents if d.relationship == Relationship.SPOUSE)
        if spouses > 1:
            msg = "A client can have at most one spouse"
            raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Matcher output
# ---------------------------------------------------------------------------


class RuleCheck(BaseModel):
    """Outcome of one exclusion rule for one plan."""

    name: str                      # e.g. "state", "health_conditions"
    description: str
    passed: bool
    value: str | None = None       # what tripped the rule, for display


class PlanMatchResult(BaseModel):
    """Full evaluation of one catalog plan against a profile."""

    plan: InsurancePlan
    eligible: bool
    checks: list[RuleCheck] = Field(default_factory=list)
    exclusion_reason: str | None = None
