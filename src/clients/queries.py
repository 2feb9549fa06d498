"""Client list and detail queries, scoped to the requesting broker."""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.models.client import Client


async def list_clients(
    db: AsyncSession,
    broker_id: str,
    page: int = 1,
    per_page: int = 25,
    search: str | None = None,
) -> tuple[list[Client], int]:
    """Paginated clients for a broker, newest first.

    `search` matches the client's name case-insensitively.
    Returns (clients, total_count).
    """
    conditions = [Client.broker_id == broker_id]
    if search:
        conditions.append(Client.full_name.ilike(f"%{search.strip()}%"))

    total = (await db.execute(select(func.count(Client.id)).where(*conditions))).scalar() or 0

    result = await db.execute(
        select(Client)
        .where(*conditions)
        .order_by(Client.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    return list(result.scalars().all()), total


async def get_client(db: AsyncSession, broker_id: str, client_id: uuid.UUID) -> Client | None:
    """One client with dependents, or None if missing or owned by another broker."""
    result = await db.execute(
        select(Client)
        .where(Client.id == client_id, Client.broker_id == broker_id)
        .options(selectinload(Client.dependents))
    )
    return result.scalar_one_or_none()
