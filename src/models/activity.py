"""UserActivity model — broker actions counted by the time saved tracker."""

from __future__ import annotations

from typing import Any

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin


class UserActivity(TimestampMixin, Base):
    """One tracked broker action (intake, chat message, ...)."""

    __tablename__ = "user_activity"

    broker_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False, comment="ActivityType enum value")
    details: Mapped[dict[str, Any] | None] = mapped_column(JSONB)

    def __repr__(self) -> str:
        return f"<UserActivity broker={self.broker_id} type={self.activity_type}>"
