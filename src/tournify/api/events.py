"""SSE (Server-Sent Events) endpoint for live score dashboards."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from tournify.core.event_bus import EventBus

router = APIRouter(prefix="/api/events", tags=["events"])
logger = logging.getLogger(__name__)

_HEARTBEAT_INTERVAL = 15  # seconds

# Every event type published by the core services. Anything else is a 400.
ALLOWED_EVENT_TYPES: frozenset[str] = frozenset(
    {
        "matches.generated",
        "match.updated",
        "match.score_submitted",
    }
)


def _get_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


def _get_semaphore(request: Request) -> asyncio.Semaphore:
    return request.app.state.sse_semaphore


@router.get("/stream")
async def sse_stream(
    request: Request,
    event_type: str | None = None,
) -> StreamingResponse:
    """Server-Sent Events stream.

    Query params:
        event_type: optional filter, one of ``ALLOWED_EVENT_TYPES``.
                    If omitted, receives all events.

    Errors:
        400: unknown event_type value
        429: connection limit reached
    """
    if event_type is not None and event_type not in ALLOWED_EVENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Unknown event_type {event_type!r}. "
                f"Valid values: {sorted(ALLOWED_EVENT_TYPES)}"
            ),
        )

    semaphore = _get_semaphore(request)
    if semaphore.locked():
        raise HTTPException(status_code=429, detail="Too many concurrent SSE connections")

    bus = _get_bus(request)

    async def generate():
        async with semaphore:
            # Flush through proxies so the browser reaches the "open" state.
            yield ": connected\n\n"

            async with bus.subscribe(event_type) as sub:
                while True:
                    if await request.is_disconnected():
                        break
                    event = await sub.get(timeout=_HEARTBEAT_INTERVAL)
                    if event is None:
                        yield ": heartbeat\n\n"
                        continue
                    data = json.dumps(event, default=str)
                    yield f"event: {event['type']}\ndata: {data}\n\n"

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/health")
async def events_health(request: Request) -> dict:
    """EventBus subscriber count."""
    return {"status": "ok", "subscribers": _get_bus(request).subscriber_count}
