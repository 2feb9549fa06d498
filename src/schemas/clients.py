"""Read models for the client list and detail endpoints."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, field_validator

from src.web.formatters import format_date


class DependentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    relationship: str = Field(validation_alias=AliasChoices("relationship_type", "relationship"))
    full_name: str | None = None
    gender: str | None = None
    date_of_birth: date | None = None
    height: Decimal | None = None
    weight: Decimal | None = None
    health_conditions: list[str] = Field(default_factory=list)
    medications: list[str] = Field(default_factory=list)

    @field_validator("health_conditions", "medications", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v


class ClientSummary(BaseModel):
    """One row of the client list."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    state: str | None = None
    date_of_birth: date | None = None
    created_at: datetime

    @computed_field
    @property
    def date_of_birth_display(self) -> str:
        """MM/DD/YYYY, or "-" when not recorded."""
        return format_date(self.date_of_birth)


class ClientDetail(ClientSummary):
    """Everything saved from an intake submission."""

    gender: str | None = None
    zip_code: str | None = None
    height: Decimal | None = None
    weight: Decimal | None = None
    health_conditions: list[str] = Field(default_factory=list)
    medications: list[str] = Field(default_factory=list)
    dependents: list[DependentOut] = Field(default_factory=list)

    @field_validator("health_conditions", "medications", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> Any:
        """NULL array columns read back as empty lists."""
        return [] if v is None else v
