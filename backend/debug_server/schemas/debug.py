# debug_server/schemas/debug.py
"""
Schemas for the debug event contract.

The server stores inbound events verbatim (plus id/serverTimestamp), so it does
not validate against `LogEntry`. The model documents the wire shape and is what
the instrumentation client uses to build outgoing events.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LogEntry(BaseModel):
    """
    One observed runtime event.

    Example:
    {
      "location": "app.js:42",
      "message": "cart total before discount",
      "data": {"total": 120},
      "timestamp": 1718000000000,
      "sessionId": "checkout-bug",
      "runId": "initial",
      "hypothesisId": "A"
    }
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(default=None, description="Unique id; server-assigned when missing")
    timestamp: Optional[int] = Field(default=None, description="Epoch ms when the event occurred at the source")
    server_timestamp: Optional[int] = Field(
        default=None,
        alias="serverTimestamp",
        description="Epoch ms of receipt; always overwritten by the server",
    )
    location: Optional[str] = Field(default=None, description="file:line style source pointer")
    message: Optional[str] = Field(default=None, description="Human-readable description")
    data: Dict[str, Any] = Field(default_factory=dict, description="Arbitrary structured payload")
    session_id: Optional[str] = Field(default=None, alias="sessionId", description="Debugging session")
    run_id: Optional[str] = Field(default=None, alias="runId", description="Reproduction pass, e.g. initial/post-fix")
    hypothesis_id: Optional[str] = Field(default=None, alias="hypothesisId", description="Hypothesis under test")

    def to_wire(self) -> Dict[str, Any]:
        """camelCase dict without unset/None fields, ready to POST or append."""
        return self.model_dump(by_alias=True, exclude_none=True)


class HealthResponse(BaseModel):
    """Response for GET /health."""
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="'ok' while running")
    log_count: int = Field(..., ge=0, alias="logCount", description="Events received since start/clear")
    port: int = Field(..., description="Configured listening port")
