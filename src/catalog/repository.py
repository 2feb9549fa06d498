"""Catalog provider — reads plans and reference lists from the database.

This is the validation boundary: rows are converted to frozen schemas here
so the matcher only ever sees well-formed plans.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.plan import InsurancePlanRecord
from src.models.reference import HealthCondition, Medication
from src.schemas.plans import InsurancePlan

logger = logging.getLogger(__name__)


def plan_from_row(row: InsurancePlanRecord) -> InsurancePlan:
    """Convert an ORM row to the matcher's plan schema.

    Raises pydantic.ValidationError for malformed rows (e.g. NULL names,
    negative price).
    """
    return InsurancePlan(
        id=str(row.id),
        company_name=row.company_name,
        product_name=row.product_name,
        product_category=row.product_category,
        monthly_price=row.product_price,
        benefits_description=row.product_benefits or "",
        available_states=row.available_states,
        disqualifying_health_conditions=row.disqualifying_health_conditions,
        disqualifying_medications=row.disqualifying_medications,
    )


async def load_plans(db: AsyncSession) -> list[InsurancePlan]:
    """Full plan catalog, ordered by company then product name.

    Malformed rows are skipped with a warning.
    """
    result = await db.execute(
        select(InsurancePlanRecord).order_by(
            InsurancePlanRecord.company_name,
            InsurancePlanRecord.product_name,
        )
    )

    plans: list[InsurancePlan] = []
    for row in result.scalars().all():
        try:
            plans.append(plan_from_row(row))
        except ValidationError as exc:
            logger.warning("Skipping malformed plan %s: %s", row.id, exc.errors())
    return plans


async def load_health_conditions(db: AsyncSession) -> list[str]:
    """Standard health condition names, alphabetical."""
    result = await db.execute(select(HealthCondition.name).order_by(HealthCondition.name))
    return list(result.scalars().all())


async def load_medications(db: AsyncSession) -> list[str]:
    """Standard medication names, alphabetical."""
    result = await db.execute(select(Medication.name).order_by(Medication.name))
    return list(result.scalars().all())
