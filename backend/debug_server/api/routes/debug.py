# debug_server/api/routes/debug.py
"""
POST /debug

Receives one debug event from an instrumented program.

Behavior:
- Body must be a JSON object (fields are all optional and stored verbatim)
- Server fills `id` when missing and always sets `serverTimestamp`
- The event is appended as one NDJSON line and echoed to the console

Callers fire and forget, so responses are minimal plain text. Parse errors are
reported on the operator console, not back to the caller.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from debug_server.services.collector import LogCollector, LogStoreError, get_collector
from debug_server.utils.ndjson import decode_event

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/debug", response_class=PlainTextResponse)
async def ingest_debug_log(
    request: Request,
    collector: LogCollector = Depends(get_collector),
):
    body = await request.body()

    try:
        event = decode_event(body)
    except ValueError as e:
        logger.error("Invalid JSON: %s", e)
        return PlainTextResponse("Invalid JSON", status_code=400)

    try:
        # File append is blocking; keep it off the event loop.
        await asyncio.to_thread(collector.ingest, event)
    except LogStoreError:
        logger.exception("Failed to store debug event")
        return PlainTextResponse("Error writing log", status_code=500)

    return PlainTextResponse("ok")
