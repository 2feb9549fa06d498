"""Domain enums used across SQLAlchemy models and Pydantic schemas.

All enums use str mixin for JSON serialization.
"""

from __future__ import annotations

from enum import Enum


class Relationship(str, Enum):
    """How a dependent relates to the primary applicant."""

    SPOUSE = "spouse"  # at most one per intake
    CHILD = "child"
    PARENT = "parent"
    OTHER = "other"


class ActivityType(str, Enum):
    """Broker activities counted by the time saved tracker."""

    CLIENT_INTAKE = "client_intake"
    AI_CHAT = "ai_chat"
    CALL_ANALYSIS = "call_analysis"
    PLAN_MATCH = "plan_match"


class Gender(str, Enum):
    """Gender options offered on the intake form."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
