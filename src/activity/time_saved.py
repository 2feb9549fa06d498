"""Time saved tracker — minutes saved estimated from logged broker activity."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.activity import UserActivity
from src.models.enums import ActivityType

logger = logging.getLogger(__name__)

MINUTES_PER_ACTIVITY: dict[str, int] = {
    ActivityType.CLIENT_INTAKE.value: 15,
    ActivityType.AI_CHAT.value: 5,
    ActivityType.CALL_ANALYSIS.value: 20,
    ActivityType.PLAN_MATCH.value: 10,
}
DEFAULT_ACTIVITY_MINUTES = 2

# Shown to brokers with no activity yet (and when the lookup fails)
STARTER_MINUTES = 45


def calculate_minutes_saved(activity_types: Iterable[str]) -> int:
    """Sum the per-activity estimates; no activity at all gives STARTER_MINUTES."""
    minutes = 0
    seen = False
    for activity_type in activity_types:
        seen = True
        minutes += MINUTES_PER_ACTIVITY.get(activity_type, DEFAULT_ACTIVITY_MINUTES)
    return minutes if seen else STARTER_MINUTES


async def get_minutes_saved(db: AsyncSession, broker_id: str) -> int:
    """Minutes saved for one broker, from their user_activity rows."""
    try:
        result = await db.execute(
            select(UserActivity.activity_type).where(UserActivity.broker_id == broker_id)
        )
        activity_types = list(result.scalars().all())
    except SQLAlchemyError:
        logger.exception("Failed to load activity for broker %s", broker_id)
        return STARTER_MINUTES

    return calculate_minutes_saved(activity_types)
