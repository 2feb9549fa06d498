"""FastAPI application entry point — wires everything together.

Usage:
    python -m src.main

Serves the broker API and runs the event system (audit log + activity
tracker) in the background.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from src.activity.audit import audit_on_event
from src.activity.events import (
    emit,
    emit_nowait,
    start_event_system,
    stop_event_system,
    subscribe,
    unsubscribe,
)
from src.activity.tracker import WATCHED_TYPES, track_activity
from src.assistant.client import assistant_client
from src.config import settings
from src.db.engine import db_lifespan
from src.schemas.events import EventType, SystemEvent
from src.web.routes import router

# ── Logging setup ────────────────────────────────────────────────────

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = logging.getLogger(__name__)

# ── FastAPI lifespan ─────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle."""
    logger.info("Starting %s (env=%s)", settings.branding.app_name, settings.environment)

    # 1. Database
    async with db_lifespan():
        logger.info("Database initialized")

        # 2. Subscribers, then the event worker
        subscribe(audit_on_event)
        subscribe(track_activity, event_types=WATCHED_TYPES)
        await start_event_system()
        await emit(SystemEvent(
            event_type=EventType.SYSTEM_STARTUP,
            actor_id="system",
            actor_role="system",
            data={"environment": settings.environment, "llm_configured": settings.llm.is_configured},
            source_module="main",
        ))

        if not settings.llm.is_configured:
            logger.warning("OPENAI_API_KEY / OPENAI_ASSISTANT_ID not set, assistant runs rule-based only")

        try:
            yield
        finally:
            logger.info("Shutting down %s...", settings.branding.app_name)

            await assistant_client.close()
            logger.info("Assistant client closed")

            await stop_event_system()
            # Worker is gone; dispatch straight to the audit subscriber
            await emit_nowait(SystemEvent(
                event_type=EventType.SYSTEM_SHUTDOWN,
                actor_id="system",
                actor_role="system",
                source_module="main",
            ))
            unsubscribe(audit_on_event)
            unsubscribe(track_activity)
            logger.info("Event system stopped")

    logger.info("Shutdown complete")


# ── FastAPI app ──────────────────────────────────────────────────────

app = FastAPI(
    title="Insurance Sales Genie API",
    description="Client intake, plan matching and sales assistant for insurance brokers",
    version="0.1.0",
    lifespan=lifespan,
)
app.include_router(router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "app_name": settings.branding.app_name,
    }


# ── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
