"""Chat assistant request/response schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from src.schemas.plans import InsurancePlan


class ReplySource(str, Enum):
    """Where an assistant reply came from."""

    LLM = "llm"
    FALLBACK = "fallback"
    ERROR = "error"


class AssistantContext(BaseModel):
    """Catalog data handed to the LLM as instructions and to the fallback."""

    insurance_plans: list[InsurancePlan] = Field(default_factory=list)
    health_conditions: list[str] = Field(default_factory=list)
    medications: list[str] = Field(default_factory=list)


class ChatRequest(BaseModel):
    message: str

    @field_validator("message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            msg = "Message must not be empty"
            raise ValueError(msg)
        return v


class AssistantReply(BaseModel):
    response: str
    source: ReplySource
