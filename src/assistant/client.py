"""OpenAI Assistants API client (v2) over httpx.

One question = one thread: create the thread, post the broker's message,
start a run with the catalog as extra instructions, poll the run until it
completes, then read the newest assistant message.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

import httpx

from src.activity.events import emit
from src.config import settings
from src.schemas.assistant import AssistantContext
from src.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)

TERMINAL_FAILURES = frozenset({"failed", "cancelled", "expired"})


class AssistantError(Exception):
    """The assistant could not produce a reply."""


class AssistantNotConfiguredError(AssistantError):
    """API key or assistant id missing."""


class AssistantRunError(AssistantError):
    """The run ended badly, timed out, or left no assistant message."""


def build_instructions(context: AssistantContext | None) -> str | None:
    """Render the catalog context as additional run instructions."""
    if context is None:
        return None
    plans = [plan.model_dump(mode="json") for plan in context.insurance_plans]
    return (
        "Here is additional context that might be helpful:\n\n"
        f"Insurance Plans: {json.dumps(plans)}\n\n"
        f"Health Conditions: {json.dumps(context.health_conditions)}\n\n"
        f"Medications: {json.dumps(context.medications)}"
    )


def extract_reply(messages: list[dict[str, Any]]) -> str:
    """Text of the newest assistant message (the API lists newest first)."""
    assistant_messages = [m for m in messages if isinstance(m, dict) and m.get("role") == "assistant"]
    if not assistant_messages:
        msg = "No response from assistant"
        raise AssistantRunError(msg)

    parts = assistant_messages[0].get("content") or []
    try:
        return "".join(
            part["text"]["value"]
            for part in parts
            if part.get("type") == "text"
        )
    except (KeyError, TypeError, AttributeError) as exc:
        msg = f"Malformed assistant message: {exc!r}"
        raise AssistantRunError(msg) from exc


def _require_id(payload: dict[str, Any], what: str) -> str:
    object_id = payload.get("id")
    if not isinstance(object_id, str) or not object_id:
        msg = f"{what} response has no id"
        raise AssistantRunError(msg)
    return object_id


def _parse_json(response: httpx.Response, path: str) -> dict[str, Any]:
    """Decode a 2xx body; anything but a JSON object is a failed request."""
    try:
        payload = response.json()
    except ValueError as exc:
        msg = f"Non-JSON response from {path}"
        raise AssistantRunError(msg) from exc
    if not isinstance(payload, dict):
        msg = f"Unexpected {type(payload).__name__} body from {path}"
        raise AssistantRunError(msg)
    return payload


class AssistantClient:
    """Async client for the OpenAI Assistants v2 REST endpoints."""

    def __init__(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=settings.llm.openai_api_base,
            headers={
                "Authorization": f"Bearer {settings.llm.openai_api_key}",
                "OpenAI-Beta": "assistants=v2",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(float(settings.llm.request_timeout), connect=10.0),
        )

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.post(path, json=payload)
        response.raise_for_status()
        return _parse_json(response, path)

    async def _get(self, path: str) -> dict[str, Any]:
        response = await self._client.get(path)
        response.raise_for_status()
        return _parse_json(response, path)

    async def _wait_for_run(self, thread_id: str, run_id: str) -> None:
        """Poll a run until it completes.

        Raises AssistantRunError on failed/cancelled/expired runs or after
        max_polls attempts.
        """
        for _ in range(settings.llm.max_polls):
            run = await self._get(f"/threads/{thread_id}/runs/{run_id}")
            status = run.get("status")
            if status == "completed":
                return
            if status in TERMINAL_FAILURES:
                msg = f"Run ended with status: {status}"
                raise AssistantRunError(msg)
            await asyncio.sleep(settings.llm.poll_interval)

        msg = f"Run {run_id} did not complete after {settings.llm.max_polls} polls"
        raise AssistantRunError(msg)

    async def ask(
        self,
        message: str,
        context: AssistantContext | None = None,
        actor_id: str | None = None,
    ) -> str:
        """Send one question to the configured assistant and return its answer.

        Args:
            message: The broker's question.
            context: Catalog data added to the run as instructions.
            actor_id: Broker username, for the emitted events.

        Returns:
            The assistant's text reply.
        """
        if not settings.llm.is_configured:
            msg = "OpenAI Assistant ID not configured"
            raise AssistantNotConfiguredError(msg)

        assistant_id = settings.llm.openai_assistant_id
        await emit(SystemEvent(
            event_type=EventType.LLM_REQUEST,
            actor_id=actor_id,
            data={"assistant_id": assistant_id, "message_length": len(message)},
            source_module="assistant.client",
        ))

        start = time.monotonic()
        try:
            thread = await self._post("/threads", {})
            thread_id = _require_id(thread, "Thread")

            await self._post(f"/threads/{thread_id}/messages", {"role": "user", "content": message})

            run_payload: dict[str, Any] = {"assistant_id": assistant_id}
            instructions = build_instructions(context)
            if instructions:
                run_payload["instructions"] = instructions
            run = await self._post(f"/threads/{thread_id}/runs", run_payload)

            await self._wait_for_run(thread_id, _require_id(run, "Run"))

            listing = await self._get(f"/threads/{thread_id}/messages")
            messages = listing.get("data")
            if not isinstance(messages, list):
                msg = "Message listing has no data"
                raise AssistantRunError(msg)
            reply = extract_reply(messages)

        except (httpx.HTTPError, AssistantError) as exc:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            await emit(SystemEvent(
                event_type=EventType.LLM_ERROR,
                actor_id=actor_id,
                data={"assistant_id": assistant_id, "error": str(exc), "latency_ms": elapsed_ms},
                source_module="assistant.client",
            ))
            logger.warning("Assistant request failed after %dms: %s", elapsed_ms, exc)
            raise

        elapsed_ms = int((time.monotonic() - start) * 1000)
        await emit(SystemEvent(
            event_type=EventType.LLM_RESPONSE,
            actor_id=actor_id,
            data={"assistant_id": assistant_id, "latency_ms": elapsed_ms, "chars": len(reply)},
            source_module="assistant.client",
        ))
        logger.info("Assistant reply: latency=%dms chars=%d", elapsed_ms, len(reply))
        return reply

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


# Module-level singleton
assistant_client = AssistantClient()
