"""SQLAlchemy ORM models for Insurance Sales Genie.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from src.models.activity import UserActivity
from src.models.audit import AuditLog
from src.models.base import Base
from src.models.client import Client, Dependent
from src.models.enums import ActivityType, Gender, Relationship
from src.models.plan import InsurancePlanRecord
from src.models.reference import HealthCondition, Medication

__all__ = [
    # Base
    "Base",
    # Models
    "InsurancePlanRecord",
    "HealthCondition",
    "Medication",
    "Client",
    "Dependent",
    "UserActivity",
    "AuditLog",
    # Enums
    "ActivityType",
    "Gender",
    "Relationship",
]
