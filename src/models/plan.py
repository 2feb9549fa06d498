"""InsurancePlanRecord model — the plan catalog read by the matcher."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Numeric, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin


class InsurancePlanRecord(TimestampMixin, Base):
    """One insurance product offering.

    The three array columns are nullable: NULL and an empty array both mean
    "no restriction".
    """

    __tablename__ = "insurance_plans"

    company_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    product_category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    product_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, comment="Monthly premium")
    product_benefits: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Eligibility restrictions
    available_states: Mapped[list[str] | None] = mapped_column(ARRAY(String(2)), comment="Empty = all states")
    disqualifying_health_conditions: Mapped[list[str] | None] = mapped_column(ARRAY(String(200)))
    disqualifying_medications: Mapped[list[str] | None] = mapped_column(ARRAY(String(200)))

    def __repr__(self) -> str:
        return f"<InsurancePlanRecord company={self.company_name} product={self.product_name}>"
