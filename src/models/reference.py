"""Reference lists offered as checkboxes on the intake form."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin


class HealthCondition(TimestampMixin, Base):
    """A standard health condition name."""

    __tablename__ = "health_conditions"

    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<HealthCondition name={self.name}>"


class Medication(TimestampMixin, Base):
    """A standard medication name."""

    __tablename__ = "medications"

    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Medication name={self.name}>"
