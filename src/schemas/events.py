"""SystemEvent schema — the event type that flows through the whole service.

Every broker-facing action emits a SystemEvent. Subscribers (audit log,
activity tracker) consume these events asynchronously.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """All event types emitted by the system."""

    # Intake
    INTAKE_SUBMITTED = "intake.submitted"
    CLIENT_SAVE_FAILED = "client.save_failed"

    # Eligibility
    ELIGIBILITY_CHECKED = "eligibility.checked"

    # Assistant
    ASSISTANT_QUERY = "assistant.query"
    ASSISTANT_FALLBACK = "assistant.fallback"

    # LLM
    LLM_REQUEST = "llm.request"
    LLM_RESPONSE = "llm.response"
    LLM_ERROR = "llm.error"

    # Broker access
    BROKER_ACCESS = "broker.access"
    RATE_LIMITED = "broker.rate_limited"

    # System
    SYSTEM_STARTUP = "system.startup"
    SYSTEM_SHUTDOWN = "system.shutdown"


class SystemEvent(BaseModel):
    """Core event that flows through the service.

    Immutable once created. Consumed by:
    - audit_on_event → writes to audit_log table
    - track_activity → writes user_activity rows for the time saved tracker
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Context; not every event concerns a client
    client_id: uuid.UUID | None = None
    actor_id: str | None = None
    actor_role: str | None = None

    # Flexible payload
    data: dict[str, Any] = Field(default_factory=dict)

    # Metadata
    source_module: str | None = Field(default=None, description="Module that emitted this event")

    model_config = {"frozen": True}
