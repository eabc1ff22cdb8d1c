"""Server-sent events stream of the change feed for admin dashboards"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from ..auth import CurrentUser, get_current_admin
from ..realtime import FEED_TABLES, ChangeEvent, change_feed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["Realtime"])

KEEPALIVE_SECONDS = 15


def format_sse(event: ChangeEvent) -> str:
    payload = json.dumps(event.to_dict(), default=str)
    return f"id: {event.sequence}\nevent: {event.event_type}\ndata: {payload}\n\n"


@router.get("/{table}")
async def stream_changes(
    table: str,
    request: Request,
    _admin: CurrentUser = Depends(get_current_admin),
):
    if table not in FEED_TABLES:
        raise HTTPException(status_code=404, detail=f"Unknown table: {table}")

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def enqueue(event: ChangeEvent):
        # publish may run in a threadpool worker
        loop.call_soon_threadsafe(queue.put_nowait, event)

    async def event_stream():
        with change_feed.subscribe(table, enqueue):
            logger.info(f"📡 Realtime stream opened for {table}")
            yield ": connected\n\n"
            try:
                while not await request.is_disconnected():
                    try:
                        event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                    except asyncio.TimeoutError:
                        yield ": keepalive\n\n"
                        continue
                    yield format_sse(event)
            finally:
                logger.info(f"📡 Realtime stream closed for {table}")

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
