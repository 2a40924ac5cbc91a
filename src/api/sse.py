# src/api/sse.py - v1
"""Server-Sent Events framing for craft events."""

from __future__ import annotations

from typing import AsyncIterator

from pydantic import TypeAdapter

from alchemy4d.core.models import CraftEvent

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_event_adapter: TypeAdapter[CraftEvent] = TypeAdapter(CraftEvent)


def format_sse(event: CraftEvent) -> str:
    """Encode one event as a ``data:`` frame."""
    return f"data: {_event_adapter.dump_json(event).decode('utf-8')}\n\n"


def parse_sse(body: str) -> list[CraftEvent]:
    """Decode a complete SSE body back into events (clients and tests)."""
    events: list[CraftEvent] = []
    for frame in body.split("\n\n"):
        frame = frame.strip()
        if frame.startswith("data:"):
            events.append(_event_adapter.validate_json(frame[len("data:"):].strip()))
    return events


async def sse_stream(events: AsyncIterator[CraftEvent]) -> AsyncIterator[str]:
    """Frame an event stream. Closing this iterator closes ``events``."""
    try:
        async for event in events:
            yield format_sse(event)
    finally:
        aclose = getattr(events, "aclose", None)
        if aclose is not None:
            await aclose()
