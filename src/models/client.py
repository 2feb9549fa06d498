"""Client and Dependent models — one saved intake submission.

Condition and medication columns hold the merged lists (standard
selections followed by custom entries).
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin
from src.models.enums import Relationship


class Client(TimestampMixin, Base):
    """The primary applicant saved by a broker."""

    __tablename__ = "clients"

    broker_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Applicant details
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    gender: Mapped[str | None] = mapped_column(String(20))
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    zip_code: Mapped[str | None] = mapped_column(String(10))
    state: Mapped[str | None] = mapped_column(String(2), index=True)
    height: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), comment="Inches")
    weight: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), comment="Pounds")

    # Health profile
    health_conditions: Mapped[list[str]] = mapped_column(ARRAY(String(200)), default=list)
    medications: Mapped[list[str]] = mapped_column(ARRAY(String(200)), default=list)

    # Relationships
    dependents: Mapped[list[Dependent]] = relationship(
        "Dependent", back_populates="client", lazy="selectin", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Client id={self.id} state={self.state} dependents={len(self.dependents)}>"


class Dependent(TimestampMixin, Base):
    """A spouse, child, parent or other dependent of a client."""

    __tablename__ = "dependents"

    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    relationship_type: Mapped[str] = mapped_column(
        "relationship", String(20), nullable=False, default=Relationship.OTHER.value
    )

    full_name: Mapped[str | None] = mapped_column(String(200))
    gender: Mapped[str | None] = mapped_column(String(20))
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    height: Mapped[Decimal | None] = mapped_column(Numeric(6, 2))
    weight: Mapped[Decimal | None] = mapped_column(Numeric(6, 2))

    health_conditions: Mapped[list[str]] = mapped_column(ARRAY(String(200)), default=list)
    medications: Mapped[list[str]] = mapped_column(ARRAY(String(200)), default=list)

    client: Mapped[Client] = relationship("Client", back_populates="dependents")

    def __repr__(self) -> str:
        return f"<Dependent relationship={self.relationship_type} client={self.client_id}>"
