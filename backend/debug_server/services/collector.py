# debug_server/services/collector.py
"""
Log collector: the one piece of shared state behind the HTTP routes.

Responsibilities:
- Own the NDJSON log file and the in-memory "received since start/clear" counter
- Stamp inbound events (id if missing, serverTimestamp always)
- Append each event as exactly one line, in arrival order
- Serve a snapshot of the file and truncate it on demand
- Echo every accepted event to the operator console

Concurrency:
- Route handlers call into this object from worker threads.
- A single lock covers stamp + append + count as one unit, so concurrent ingests
  never interleave partial lines or lose counter updates. Clear and snapshot
  reads take the same lock.

The file is opened per operation in append mode, so an instrumented program can
also append lines to the same file directly without going through HTTP.
"""

from __future__ import annotations

import logging
import os
import threading
import time
import uuid
from enum import Enum
from typing import Any, Callable, Dict, Optional

from fastapi import Request

from debug_server.utils.ndjson import encode_line

logger = logging.getLogger(__name__)
console = logging.getLogger("debug_server.console")


class LogStoreError(RuntimeError):
    """Raised when the log file cannot be prepared, written, read or truncated."""
    pass


class CollectorState(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


def _epoch_ms(clock: Callable[[], float]) -> int:
    return int(clock() * 1000)


def new_log_id(now_ms: int) -> str:
    """Time-based id with a short random suffix, e.g. log_1718000000000_3fa9c1d2."""
    return f"log_{now_ms}_{uuid.uuid4().hex[:8]}"


class LogCollector:
    """Append-only NDJSON store plus counter, owned by one server instance."""

    def __init__(self, path: str, clock: Optional[Callable[[], float]] = None):
        self.path = path
        self._clock = clock or time.time
        self._lock = threading.Lock()
        self._count = 0
        self.state = CollectorState.STARTING

    @property
    def count(self) -> int:
        return self._count

    # -------------------------
    # Lifecycle
    # -------------------------
    def start(self) -> None:
        """
        Create the log directory and truncate the file.

        Failures here are fatal to the server: it must not accept events it
        cannot persist.
        """
        with self._lock:
            try:
                os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
                self._truncate()
            except OSError as e:
                raise LogStoreError(f"Cannot prepare log file {self.path}: {e}") from e
            self._count = 0
            self.state = CollectorState.RUNNING

    def begin_drain(self) -> None:
        self.state = CollectorState.DRAINING

    def stop(self) -> int:
        """Mark the collector stopped and return the final count."""
        with self._lock:
            self.state = CollectorState.STOPPED
            return self._count

    # -------------------------
    # Operations
    # -------------------------
    def ingest(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """
        Stamp and append one event. Returns the stored entry.

        The caller's object is not mutated; unknown fields pass through untouched.
        """
        with self._lock:
            now_ms = _epoch_ms(self._clock)
            entry = dict(event)
            if not entry.get("id"):
                entry["id"] = new_log_id(now_ms)
            entry["serverTimestamp"] = now_ms

            line = encode_line(entry)
            try:
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line)
            except OSError as e:
                raise LogStoreError(f"Cannot append to {self.path}: {e}") from e

            self._count += 1
            self._echo(self._count, entry)
            return entry

    def read(self) -> bytes:
        """Return the raw file content, or b"" if the file does not exist yet."""
        with self._lock:
            try:
                with open(self.path, "rb") as f:
                    return f.read()
            except FileNotFoundError:
                return b""
            except OSError as e:
                raise LogStoreError(f"Cannot read {self.path}: {e}") from e

    def clear(self) -> None:
        with self._lock:
            try:
                self._truncate()
            except OSError as e:
                raise LogStoreError(f"Cannot clear {self.path}: {e}") from e
            self._count = 0
        console.info("Logs cleared")

    # -------------------------
    # Internals
    # -------------------------
    def _truncate(self) -> None:
        with open(self.path, "w", encoding="utf-8"):
            pass

    @staticmethod
    def _echo(count: int, entry: Dict[str, Any]) -> None:
        hyp = f"[{entry['hypothesisId']}] " if entry.get("hypothesisId") else ""
        console.info(
            "[%d] %s%s: %s",
            count,
            hyp,
            entry.get("location", "-"),
            entry.get("message", ""),
        )


def get_collector(request: Request) -> LogCollector:
    """
    FastAPI dependency returning the app's collector.

    Usage:
        @router.post(...)
        async def handler(collector: LogCollector = Depends(get_collector)):
            ...
    """
    return request.app.state.collector
