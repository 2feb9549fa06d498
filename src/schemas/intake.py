"""Intake form payloads: what a broker submits and what comes back."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from src.intake.states import US_STATES
from src.models.enums import Gender, Relationship
from src.schemas.plans import InsurancePlan, PlanMatchResult


class DependentSubmission(BaseModel):
    """A dependent as entered on the intake form."""

    relationship: Relationship = Relationship.OTHER
    full_name: str = ""
    gender: Gender | None = None
    date_of_birth: date | None = None
    height: Decimal | None = Field(default=None, ge=0)
    weight: Decimal | None = Field(default=None, ge=0)

    health_conditions: list[str] = Field(default_factory=list)
    custom_health_conditions: list[str] = Field(default_factory=list)
    medications: list[str] = Field(default_factory=list)
    custom_medications: list[str] = Field(default_factory=list)

    @field_validator("relationship", mode="before")
    @classmethod
    def blank_is_other(cls, v: Any) -> Any:
        """The "Add Other Dependent" button submits an empty relationship."""
        if v is None or v == "":
            return Relationship.OTHER
        return v


class IntakeSubmission(BaseModel):
    """Primary applicant plus dependents, as submitted by the broker."""

    full_name: str = Field(min_length=1)
    gender: Gender
    date_of_birth: date
    zip_code: str = Field(min_length=1, max_length=10)
    state: str
    height: Decimal | None = Field(default=None, ge=0)
    weight: Decimal | None = Field(default=None, ge=0)

    health_conditions: list[str] = Field(default_factory=list)
    custom_health_conditions: list[str] = Field(default_factory=list)
    medications: list[str] = Field(default_factory=list)
    custom_medications: list[str] = Field(default_factory=list)

    dependents: list[DependentSubmission] = Field(default_factory=list)

    @field_validator("state")
    @classmethod
    def validate_state(cls, v: str) -> str:
        code = v.strip().upper()
        if code not in US_STATES:
            msg = f"Unknown state code: {v}"
            raise ValueError(msg)
        return code

    @model_validator(mode="after")
    def at_most_one_spouse(self) -> IntakeSubmission:
        spouses = [d for d in self.dependents if d.relationship == Relationship.SPOUSE]
        if len(spouses) > 1:
            msg = "Only one spouse can be added"
            raise ValueError(msg)
        return self


class IntakeResult(BaseModel):
    """Matched plans for a submission. client_id is None when saving failed.

    evaluations is only filled when the broker asks why plans were excluded.
    """

    client_id: uuid.UUID | None = None
    matching_plans: list[InsurancePlan] = Field(default_factory=list)
    total_plans: int = 0
    evaluations: list[PlanMatchResult] | None = None
