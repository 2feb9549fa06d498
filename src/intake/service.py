"""Intake service — match a submission against the catalog and save the client.

Matching never depends on saving: if the client can't be persisted the
broker still gets the matched plans, with client_id left empty.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.activity.events import emit
from src.catalog.repository import load_plans
from src.eligibility.engine import evaluate_plans, match_plans
from src.intake.builder import build_client_profile, merged_conditions, merged_medications
from src.models.client import Client, Dependent
from src.schemas.events import EventType, SystemEvent
from src.schemas.intake import IntakeResult, IntakeSubmission

logger = logging.getLogger(__name__)


def client_from_submission(submission: IntakeSubmission, broker_id: str) -> Client:
    """Build the Client row (with dependents) for a submission."""
    client = Client(
        id=uuid.uuid4(),
        broker_id=broker_id,
        full_name=submission.full_name,
        gender=submission.gender.value,
        date_of_birth=submission.date_of_birth,
        zip_code=submission.zip_code,
        state=submission.state,
        height=submission.height,
        weight=submission.weight,
        health_conditions=merged_conditions(submission),
        medications=merged_medications(submission),
    )
    client.dependents = [
        Dependent(
            relationship_type=dep.relationship.value,
            full_name=dep.full_name or None,
            gender=dep.gender.value if dep.gender else None,
            date_of_birth=dep.date_of_birth,
            height=dep.height,
            weight=dep.weight,
            health_conditions=merged_conditions(dep),
            medications=merged_medications(dep),
        )
        for dep in submission.dependents
    ]
    return client


async def _save_client(db: AsyncSession, submission: IntakeSubmission, broker_id: str) -> uuid.UUID | None:
    """Persist the client and dependents. Returns None on database errors."""
    client = client_from_submission(submission, broker_id)
    try:
        db.add(client)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Failed to save client for broker %s", broker_id)
        await emit(SystemEvent(
            event_type=EventType.CLIENT_SAVE_FAILED,
            actor_id=broker_id,
            actor_role="broker",
            data={"error": type(exc).__name__},
            source_module="intake.service",
        ))
        return None

    logger.info("Saved client %s with %d dependents", client.id, len(submission.dependents))
    return client.id


async def submit_intake(
    db: AsyncSession,
    submission: IntakeSubmission,
    broker_id: str,
    explain: bool = False,
) -> IntakeResult:
    """Match the primary applicant against the catalog, then save the client.

    Dependents are saved but not matched. With `explain` the result also
    carries every rule outcome for every plan.
    """
    profile = build_client_profile(submission)
    catalog = await load_plans(db)
    matching = match_plans(profile, catalog)

    logger.info(
        "Intake matched %d/%d plans (state=%s, conditions=%d, medications=%d)",
        len(matching),
        len(catalog),
        profile.state,
        len(profile.health_conditions),
        len(profile.medications),
    )
    await emit(SystemEvent(
        event_type=EventType.ELIGIBILITY_CHECKED,
        actor_id=broker_id,
        actor_role="broker",
        data={
            "state": profile.state,
            "catalog_size": len(catalog),
            "matched": len(matching),
            "plan_ids": [p.id for p in matching],
        },
        source_module="intake.service",
    ))

    client_id = await _save_client(db, submission, broker_id)

    # Logged even when saving failed: the broker still did the intake
    await emit(SystemEvent(
        event_type=EventType.INTAKE_SUBMITTED,
        client_id=client_id,
        actor_id=broker_id,
        actor_role="broker",
        data={"dependents": len(submission.dependents), "matched": len(matching)},
        source_module="intake.service",
    ))

    return IntakeResult(
        client_id=client_id,
        matching_plans=matching,
        total_plans=len(catalog),
        evaluations=evaluate_plans(profile, catalog) if explain else None,
    )
