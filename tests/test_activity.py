"""Tests for the event system, activity tracker and time saved estimate."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from src.activity import events
from src.activity.time_saved import (
    STARTER_MINUTES,
    calculate_minutes_saved,
    get_minutes_saved,
)
from src.activity.tracker import activity_from_event, track_activity
from src.schemas.events import EventType, SystemEvent

# ── Time saved ───────────────────────────────────────────────────────


class TestCalculateMinutesSaved:
    def test_no_activity_gives_starter_value(self):
        assert calculate_minutes_saved([]) == STARTER_MINUTES == 45

    def test_known_activities(self):
        assert calculate_minutes_saved(["client_intake", "ai_chat", "ai_chat"]) == 25

    def test_all_known_types(self):
        assert calculate_minutes_saved(["client_intake", "ai_chat", "call_analysis", "plan_match"]) == 50

    def test_unknown_activity_counts_two_minutes(self):
        assert calculate_minutes_saved(["export_pdf"]) == 2

    def test_accepts_generator(self):
        assert calculate_minutes_saved(t for t in ["plan_match"]) == 10


class TestGetMinutesSaved:
    @pytest.mark.asyncio()
    async def test_sums_broker_rows(self):
        result = MagicMock()
        result.scalars.return_value.all.return_value = ["client_intake", "client_intake"]
        db = AsyncMock()
        db.execute = AsyncMock(return_value=result)

        assert await get_minutes_saved(db, "broker1") == 30

    @pytest.mark.asyncio()
    async def test_db_error_gives_starter_value(self):
        db = AsyncMock()
        db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

        assert await get_minutes_saved(db, "broker1") == STARTER_MINUTES


# ── Tracker ──────────────────────────────────────────────────────────


class TestActivityFromEvent:
    def test_intake_event(self):
        client_id = uuid.uuid4()
        event = SystemEvent(
            event_type=EventType.INTAKE_SUBMITTED,
            actor_id="broker1",
            client_id=client_id,
            data={"dependents": 2},
        )
        activity = activity_from_event(event)
        assert activity.broker_id == "broker1"
        assert activity.activity_type == "client_intake"
        assert activity.details == {"dependents": 2, "client_id": str(client_id)}

    def test_chat_event(self):
        event = SystemEvent(event_type=EventType.ASSISTANT_QUERY, actor_id="broker1")
        assert activity_from_event(event).activity_type == "ai_chat"

    def test_untracked_event(self):
        event = SystemEvent(event_type=EventType.BROKER_ACCESS, actor_id="broker1")
        assert activity_from_event(event) is None

    def test_no_actor(self):
        event = SystemEvent(event_type=EventType.INTAKE_SUBMITTED)
        assert activity_from_event(event) is None


class TestTrackActivity:
    @pytest.mark.asyncio()
    async def test_persists_row(self):
        session = MagicMock()
        session.add = MagicMock()
        session.commit = AsyncMock()
        factory = MagicMock()
        factory.return_value.__aenter__ = AsyncMock(return_value=session)
        factory.return_value.__aexit__ = AsyncMock(return_value=False)

        event = SystemEvent(event_type=EventType.ASSISTANT_QUERY, actor_id="broker1")
        with patch("src.activity.tracker.async_session_factory", factory):
            await track_activity(event)

        session.add.assert_called_once()
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio()
    async def test_db_failure_does_not_raise(self):
        factory = MagicMock()
        factory.return_value.__aenter__ = AsyncMock(side_effect=OSError("connection refused"))
        factory.return_value.__aexit__ = AsyncMock(return_value=False)

        event = SystemEvent(event_type=EventType.INTAKE_SUBMITTED, actor_id="broker1")
        with patch("src.activity.tracker.async_session_factory", factory):
            await track_activity(event)

    @pytest.mark.asyncio()
    async def test_untracked_event_skips_db(self):
        factory = MagicMock()
        with patch("src.activity.tracker.async_session_factory", factory):
            await track_activity(SystemEvent(event_type=EventType.LLM_REQUEST, actor_id="broker1"))

        factory.assert_not_called()


# ── Event dispatch ───────────────────────────────────────────────────


class TestDispatch:
    @pytest.mark.asyncio()
    async def test_typed_and_global_subscribers(self):
        global_handler = AsyncMock(__name__="global_handler")
        typed_handler = AsyncMock(__name__="typed_handler")
        events.subscribe(global_handler)
        events.subscribe(typed_handler, event_types=[EventType.INTAKE_SUBMITTED])
        try:
            await events.emit_nowait(SystemEvent(event_type=EventType.ASSISTANT_QUERY))
            await events.emit_nowait(SystemEvent(event_type=EventType.INTAKE_SUBMITTED))
        finally:
            events.unsubscribe(global_handler)
            events.unsubscribe(typed_handler)

        assert global_handler.await_count == 2
        assert typed_handler.await_count == 1

    @pytest.mark.asyncio()
    async def test_failing_handler_is_isolated(self):
        bad = AsyncMock(side_effect=RuntimeError("boom"), __name__="bad")
        good = AsyncMock(__name__="good")
        events.subscribe(bad)
        events.subscribe(good)
        try:
            await events.emit_nowait(SystemEvent(event_type=EventType.SYSTEM_STARTUP))
        finally:
            events.unsubscribe(bad)
            events.unsubscribe(good)

        good.assert_awaited_once()

    def test_handlers_for_orders_global_first(self):
        async def everything(event):
            pass

        async def intake_only(event):
            pass

        events.subscribe(intake_only, event_types=[EventType.INTAKE_SUBMITTED])
        events.subscribe(everything)
        try:
            assert events.handlers_for(EventType.INTAKE_SUBMITTED) == [everything, intake_only]
            assert events.handlers_for(EventType.ASSISTANT_QUERY) == [everything]
        finally:
            events.unsubscribe(everything)
            events.unsubscribe(intake_only)

        assert events.handlers_for(EventType.INTAKE_SUBMITTED) == []

    @pytest.mark.asyncio()
    async def test_queued_events_flushed_on_stop(self):
        received: list[EventType] = []

        async def record(event):
            received.append(event.event_type)

        events.subscribe(record)
        try:
            await events.start_event_system()
            await events.emit(SystemEvent(event_type=EventType.INTAKE_SUBMITTED))
            await events.emit(SystemEvent(event_type=EventType.ASSISTANT_QUERY))
            await events.stop_event_system()
        finally:
            events.unsubscribe(record)

        assert received == [EventType.INTAKE_SUBMITTED, EventType.ASSISTANT_QUERY]
