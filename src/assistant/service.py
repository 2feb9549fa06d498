"""Assistant service — LLM first, rule-based fallback second."""

from __future__ import annotations

import logging

import httpx

from src.activity.events import emit
from src.assistant.client import AssistantError, assistant_client
from src.assistant.fallback import answer_query
from src.config import settings
from src.schemas.assistant import AssistantContext, AssistantReply, ReplySource
from src.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)

GREETING = settings.branding.assistant_greeting
ERROR_REPLY = "I'm sorry, I encountered an error while processing your request. Please try again."


async def ask(message: str, context: AssistantContext, broker_id: str) -> AssistantReply:
    """Answer a broker's question, falling back to the rule-based answer on LLM failure.

    The caller records the query itself (assistant.query) before loading
    context; this only reports when the fallback was used.
    """
    try:
        reply = await assistant_client.ask(message, context, actor_id=broker_id)
        return AssistantReply(response=reply, source=ReplySource.LLM)
    except (AssistantError, httpx.HTTPError) as exc:
        logger.info("Using rule-based assistant for broker %s: %s", broker_id, exc)
        await emit(SystemEvent(
            event_type=EventType.ASSISTANT_FALLBACK,
            actor_id=broker_id,
            actor_role="broker",
            data={"reason": type(exc).__name__},
            source_module="assistant.service",
        ))

    return AssistantReply(response=answer_query(message, context), source=ReplySource.FALLBACK)
