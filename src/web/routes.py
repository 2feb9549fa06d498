"""Broker API — FastAPI router for intake, catalog, assistant and clients.

All routes require HTTP Basic Auth via the verify_broker dependency.
"""
# ruff: noqa: B008

from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.activity.events import emit
from src.activity.time_saved import get_minutes_saved
from src.assistant.service import ERROR_REPLY, GREETING, ask
from src.catalog.repository import load_health_conditions, load_medications, load_plans
from src.clients.queries import get_client, list_clients
from src.db.engine import get_session
from src.eligibility.display import (
    PlanSortField,
    SortDirection,
    filter_plans,
    plan_categories,
    sort_plans,
)
from src.intake.service import submit_intake
from src.schemas.assistant import AssistantContext, AssistantReply, ChatRequest, ReplySource
from src.schemas.clients import ClientDetail, ClientSummary
from src.schemas.events import EventType, SystemEvent
from src.schemas.intake import IntakeResult, IntakeSubmission
from src.security.rate_limiter import rate_limiter
from src.web.auth import verify_broker
from src.web.formatters import format_price, format_time_saved

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["broker"])

CLIENTS_PER_PAGE = 25


async def _emit_access(broker: str, page: str, client_id: uuid.UUID | None = None) -> None:
    """Emit BROKER_ACCESS audit event for client data views."""
    await emit(SystemEvent(
        event_type=EventType.BROKER_ACCESS,
        client_id=client_id,
        actor_id=broker,
        actor_role="broker",
        data={"page": page},
        source_module="web.routes",
    ))


# ── Intake ───────────────────────────────────────────────────────────


@router.post("/intake", response_model=IntakeResult)
async def intake(
    submission: IntakeSubmission,
    explain: bool = Query(False),
    db: AsyncSession = Depends(get_session),
    broker: str = Depends(verify_broker),
) -> IntakeResult:
    """Match the applicant against the catalog and save the client.

    `?explain=true` adds per-plan rule outcomes and exclusion reasons.
    """
    return await submit_intake(db, submission, broker, explain=explain)


# ── Catalog ──────────────────────────────────────────────────────────


@router.get("/plans")
async def plans(
    category: str | None = Query(None),
    search: str | None = Query(None),
    sort: PlanSortField = Query(PlanSortField.MONTHLY_PRICE),
    direction: SortDirection = Query(SortDirection.ASC),
    db: AsyncSession = Depends(get_session),
    broker: str = Depends(verify_broker),
) -> dict[str, Any]:
    """Plan catalog with category filter, text search and sorting."""
    catalog = await load_plans(db)
    shown = sort_plans(filter_plans(catalog, category or None, search or None), sort, direction)

    return {
        "plans": [
            {**plan.model_dump(mode="json"), "price_display": format_price(plan.monthly_price)}
            for plan in shown
        ],
        "categories": plan_categories(catalog),
        "showing": len(shown),
        "total": len(catalog),
        "summary": f"Showing {len(shown)} of {len(catalog)} plans",
    }


@router.get("/reference/health-conditions")
async def health_conditions(
    db: AsyncSession = Depends(get_session),
    broker: str = Depends(verify_broker),
) -> list[str]:
    """Standard health conditions for the intake checkboxes."""
    return await load_health_conditions(db)


@router.get("/reference/medications")
async def medications(
    db: AsyncSession = Depends(get_session),
    broker: str = Depends(verify_broker),
) -> list[str]:
    """Standard medications for the intake checkboxes."""
    return await load_medications(db)


# ── Assistant ────────────────────────────────────────────────────────


@router.get("/assistant/greeting", response_model=AssistantReply)
async def assistant_greeting(broker: str = Depends(verify_broker)) -> AssistantReply:
    return AssistantReply(response=GREETING, source=ReplySource.FALLBACK)


@router.post("/assistant/chat", response_model=AssistantReply)
async def assistant_chat(
    body: ChatRequest,
    db: AsyncSession = Depends(get_session),
    broker: str = Depends(verify_broker),
) -> AssistantReply:
    """Answer a broker question using the LLM, or the rule-based fallback."""
    allowed, retry_after = await rate_limiter.check_chat(broker)
    if not allowed:
        await emit(SystemEvent(
            event_type=EventType.RATE_LIMITED,
            actor_id=broker,
            actor_role="broker",
            data={"retry_after": retry_after},
            source_module="web.routes",
        ))
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many assistant requests",
            headers={"Retry-After": str(retry_after)},
        )

    # Counted as soon as it is accepted, even if loading context fails below
    await emit(SystemEvent(
        event_type=EventType.ASSISTANT_QUERY,
        actor_id=broker,
        actor_role="broker",
        data={"message_length": len(body.message)},
        source_module="web.routes",
    ))

    try:
        context = AssistantContext(
            insurance_plans=await load_plans(db),
            health_conditions=await load_health_conditions(db),
            medications=await load_medications(db),
        )
    except SQLAlchemyError:
        logger.exception("Failed to load assistant context for broker %s", broker)
        return AssistantReply(response=ERROR_REPLY, source=ReplySource.ERROR)

    return await ask(body.message, context, broker)


# ── Clients ──────────────────────────────────────────────────────────


@router.get("/clients")
async def clients_list(
    page: int = Query(1, ge=1),
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
    broker: str = Depends(verify_broker),
) -> dict[str, Any]:
    """Paginated list of the broker's saved clients."""
    await _emit_access(broker, "clients")

    clients, total = await list_clients(
        db, broker, page=page, per_page=CLIENTS_PER_PAGE, search=search or None
    )
    total_pages = max(1, (total + CLIENTS_PER_PAGE - 1) // CLIENTS_PER_PAGE)

    return {
        "clients": [ClientSummary.model_validate(c).model_dump(mode="json") for c in clients],
        "total": total,
        "page": page,
        "total_pages": total_pages,
    }


@router.get("/clients/{client_id}", response_model=ClientDetail)
async def client_detail(
    client_id: str,
    db: AsyncSession = Depends(get_session),
    broker: str = Depends(verify_broker),
) -> ClientDetail:
    """Full saved intake for one client, dependents included."""
    try:
        client_uuid = uuid.UUID(client_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found") from None

    await _emit_access(broker, "client_detail", client_uuid)

    client = await get_client(db, broker, client_uuid)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")

    return ClientDetail.model_validate(client)


# ── Activity ─────────────────────────────────────────────────────────


@router.get("/activity/time-saved")
async def time_saved(
    db: AsyncSession = Depends(get_session),
    broker: str = Depends(verify_broker),
) -> dict[str, Any]:
    """Estimated minutes the broker has saved using the app."""
    minutes = await get_minutes_saved(db, broker)
    return {"minutes": minutes, "display": format_time_saved(minutes)}
