# debug_server/api/routes/logs.py
"""
GET /logs and POST /clear

- /logs returns the log file verbatim (NDJSON) so the agent can read every
  entry collected since the last start/clear.
- /clear truncates the file and resets the counter between reproduction runs.

No filtering or parsing happens here; interpretation belongs to the caller.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response

from debug_server.services.collector import LogCollector, LogStoreError, get_collector

logger = logging.getLogger(__name__)

router = APIRouter()

NDJSON_MEDIA_TYPE = "application/x-ndjson"


@router.get("/logs")
async def get_logs(collector: LogCollector = Depends(get_collector)):
    """
    Snapshot of the log file.

    An ingest racing with this call may or may not be included.
    """
    try:
        content = await asyncio.to_thread(collector.read)
    except LogStoreError:
        logger.exception("Failed to read debug log")
        return PlainTextResponse("Error reading logs", status_code=500)

    return Response(content=content, media_type=NDJSON_MEDIA_TYPE)


@router.post("/clear", response_class=PlainTextResponse)
async def clear_logs(collector: LogCollector = Depends(get_collector)):
    try:
        await asyncio.to_thread(collector.clear)
    except LogStoreError:
        logger.exception("Failed to clear debug log")
        return PlainTextResponse("Error clearing logs", status_code=500)

    return PlainTextResponse("Logs cleared")
