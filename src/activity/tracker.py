"""Activity tracker subscriber — records broker actions for the time saved card.

Only events with a broker actor and a known activity mapping are recorded.
"""

from __future__ import annotations

import logging

from src.db.engine import async_session_factory
from src.models.activity import UserActivity
from src.models.enums import ActivityType
from src.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)

EVENT_ACTIVITY: dict[EventType, ActivityType] = {
    EventType.INTAKE_SUBMITTED: ActivityType.CLIENT_INTAKE,
    EventType.ASSISTANT_QUERY: ActivityType.AI_CHAT,
}

# Subscribe with these so the handler never sees unrelated events
WATCHED_TYPES: list[EventType] = list(EVENT_ACTIVITY)


def activity_from_event(event: SystemEvent) -> UserActivity | None:
    """Build the user_activity row for an event, or None if it isn't tracked."""
    activity_type = EVENT_ACTIVITY.get(event.event_type)
    if activity_type is None or not event.actor_id:
        return None

    details = dict(event.data)
    if event.client_id is not None:
        details["client_id"] = str(event.client_id)

    return UserActivity(
        broker_id=event.actor_id,
        activity_type=activity_type.value,
        details=details,
    )


async def track_activity(event: SystemEvent) -> None:
    """Persist the activity row for a tracked event. Never raises."""
    activity = activity_from_event(event)
    if activity is None:
        return

    try:
        async with async_session_factory() as db:
            db.add(activity)
            await db.commit()
    except Exception:
        logger.exception(
            "Failed to record activity %s for broker %s",
            activity.activity_type,
            activity.broker_id,
        )
