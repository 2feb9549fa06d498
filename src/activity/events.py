"""In-process event bus for SystemEvents.

Intake, matching and assistant code emit events; the audit log and the
activity tracker consume them. Handlers run on a background worker so an
HTTP response never waits on a database write for bookkeeping.

Usage:
    from src.activity.events import emit, subscribe

    subscribe(track_activity, event_types=[EventType.INTAKE_SUBMITTED])

    await emit(SystemEvent(
        event_type=EventType.INTAKE_SUBMITTED,
        actor_id=broker_id,
        client_id=client_id,
    ))
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine, Iterable
from typing import Any

from src.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[SystemEvent], Coroutine[Any, Any, None]]

# Seconds to wait for queued events at shutdown before dropping them
DRAIN_TIMEOUT = 5.0

# None holds handlers that receive every event
_registry: dict[EventType | None, list[EventHandler]] = {}
_queue: asyncio.Queue[SystemEvent] | None = None
_worker: asyncio.Task[None] | None = None


# ── Registration ─────────────────────────────────────────────────────


def subscribe(handler: EventHandler, event_types: Iterable[EventType] | None = None) -> None:
    """Register `handler` for the given event types, or for all events."""
    keys: list[EventType | None] = [None] if event_types is None else list(event_types)
    for key in keys:
        _registry.setdefault(key, []).append(handler)
    logger.info(
        "Subscribed %s to %s",
        handler.__name__,
        "all events" if event_types is None else [k.value for k in keys if k is not None],
    )


def unsubscribe(handler: EventHandler) -> None:
    """Remove `handler` everywhere it was registered."""
    for handlers in _registry.values():
        while handler in handlers:
            handlers.remove(handler)


def handlers_for(event_type: EventType) -> list[EventHandler]:
    """Global handlers first, then the ones registered for this type."""
    return [*_registry.get(None, ()), *_registry.get(event_type, ())]


# ── Publishing ───────────────────────────────────────────────────────


async def emit(event: SystemEvent) -> None:
    """Queue an event for the background worker, starting it if needed."""
    await _ensure_running().put(event)
    logger.debug("Queued %s (actor=%s)", event.event_type.value, event.actor_id)


async def emit_nowait(event: SystemEvent) -> None:
    """Run the handlers for an event right away, bypassing the queue."""
    await _dispatch(event)


async def _dispatch(event: SystemEvent) -> None:
    handlers = handlers_for(event.event_type)
    if not handlers:
        return

    results = await asyncio.gather(*(h(event) for h in handlers), return_exceptions=True)
    for handler, result in zip(handlers, results):
        if isinstance(result, Exception):
            logger.error(
                "Handler %s failed for %s: %s",
                handler.__name__,
                event.event_type.value,
                result,
                exc_info=result,
            )


# ── Worker ───────────────────────────────────────────────────────────


def _ensure_running() -> asyncio.Queue[SystemEvent]:
    global _queue, _worker
    if _queue is None:
        _queue = asyncio.Queue()
    if _worker is None or _worker.done():
        _worker = asyncio.create_task(_drain(_queue), name="event-worker")
    return _queue


async def _drain(queue: asyncio.Queue[SystemEvent]) -> None:
    while True:
        event = await queue.get()
        try:
            await _dispatch(event)
        except Exception:
            logger.exception("Event worker failed on %s", event.event_type.value)
        finally:
            queue.task_done()


# ── Lifecycle ────────────────────────────────────────────────────────


async def start_event_system() -> None:
    """Start the worker. Call from the FastAPI lifespan."""
    _ensure_running()
    logger.info(
        "Event system started (%d handler registrations)",
        sum(len(h) for h in _registry.values()),
    )


async def stop_event_system() -> None:
    """Flush queued events (bounded by DRAIN_TIMEOUT) and stop the worker."""
    global _queue, _worker

    if _queue is not None:
        try:
            await asyncio.wait_for(_queue.join(), timeout=DRAIN_TIMEOUT)
        except TimeoutError:
            logger.warning("Dropped %d queued events at shutdown", _queue.qsize())

    if _worker is not None:
        _worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await _worker

    _queue = None
    _worker = None
    logger.info("Event system stopped")
