# debug_server/client.py
"""
Client helpers for instrumented Python programs and operator tooling.

Two audiences:
- Instrumented code calls `DebugLogClient.log(...)` (or `append_to_file(...)`
  when no server is running). These calls are fire-and-forget: a missing server,
  a timeout or an error status must never change the program being debugged,
  so failures are logged at debug level and reported as False.
- The debugging workflow calls `fetch_logs()`, `health()` and `clear()`. These
  raise `httpx.HTTPError` on failure because the operator needs to know.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from debug_server.schemas.debug import LogEntry
from debug_server.services.collector import new_log_id
from debug_server.utils.ndjson import encode_line, parse_ndjson

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://127.0.0.1:3947"


def build_entry(
    location: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
    *,
    hypothesis_id: Optional[str] = None,
    session_id: Optional[str] = None,
    run_id: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Build a wire-format LogEntry stamped with the caller's clock."""
    entry = LogEntry(
        timestamp=int(time.time() * 1000),
        location=location,
        message=message,
        data=data or {},
        session_id=session_id,
        run_id=run_id,
        hypothesis_id=hypothesis_id,
        **extra,
    )
    return entry.to_wire()


class DebugLogClient:
    """
    Thin HTTP client for the debug server.

    Pass `http_client` to reuse an existing httpx.Client (it is not closed by
    `close()`); otherwise one is created for `base_url` and owned here.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        session_id: Optional[str] = None,
        run_id: Optional[str] = None,
        timeout: float = 0.5,
        http_client: Optional[httpx.Client] = None,
    ):
        self.session_id = session_id
        self.run_id = run_id
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            trust_env=False,
        )

    def __enter__(self) -> "DebugLogClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    # -------------------------
    # Instrumentation side
    # -------------------------
    def log(
        self,
        location: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        *,
        hypothesis_id: Optional[str] = None,
        run_id: Optional[str] = None,
        **extra: Any,
    ) -> bool:
        """Send one event. Returns True if the server acknowledged it, never raises."""
        try:
            payload = build_entry(
                location,
                message,
                data,
                hypothesis_id=hypothesis_id,
                session_id=self.session_id,
                run_id=run_id or self.run_id,
                **extra,
            )
            resp = self._http.post("/debug", json=payload)
        except (httpx.HTTPError, ValidationError, TypeError, ValueError) as e:
            # ValidationError/TypeError: bad argument types or a clashing keyword;
            # ValueError: `data` held something JSON cannot encode
            logger.debug("Debug log not delivered (%s): %s", location, e)
            return False

        if resp.status_code != 200:
            logger.debug("Debug log rejected with %d (%s)", resp.status_code, location)
            return False
        return True

    # -------------------------
    # Operator side
    # -------------------------
    def fetch_logs(self) -> List[Dict[str, Any]]:
        resp = self._http.get("/logs")
        resp.raise_for_status()
        return parse_ndjson(resp.content)

    def health(self) -> Dict[str, Any]:
        resp = self._http.get("/health")
        resp.raise_for_status()
        return resp.json()

    def clear(self) -> None:
        resp = self._http.post("/clear")
        resp.raise_for_status()


def append_to_file(
    path: str,
    location: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
    **fields: Any,
) -> bool:
    """
    Append one event straight to the NDJSON file, bypassing HTTP.

    The client generates `id` since no server stamps it. `serverTimestamp` is
    left out on purpose: nothing received this event. Like `log()`, this never
    raises: bad arguments and I/O errors both return False.
    """
    try:
        entry = build_entry(location, message, data, **fields)
        entry.setdefault("id", new_log_id(entry["timestamp"]))
        line = encode_line(entry)
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(line)
    except (OSError, ValidationError, TypeError, ValueError) as e:
        logger.debug("Debug log not written to %s: %s", path, e)
        return False
    return True
