# debug_server/utils/ndjson.py
"""
NDJSON encoding/decoding helpers.

Format rules:
- One complete JSON object per line, UTF-8, terminated by "\n".
- Lines are compact (no spaces after separators) and keep non-ASCII text as-is.
- Blank lines are tolerated when reading (a truncated file is simply empty).

Strictness:
- Inbound events must be RFC 8259 JSON. Python's json module accepts NaN and
  Infinity by default; those are rejected here since no other JSON reader
  will be able to load the resulting line.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Union


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name!r} is not valid JSON")


def decode_event(body: Union[bytes, str]) -> Dict[str, Any]:
    """
    Parse a request body into a single event object.

    Raises:
        ValueError: body is not UTF-8, not valid JSON, or not a JSON object.
            (json.JSONDecodeError and UnicodeDecodeError are both ValueErrors.)
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8")

    value = json.loads(body, parse_constant=_reject_constant)
    if not isinstance(value, dict):
        raise ValueError(f"expected a JSON object, got {type(value).__name__}")
    return value


def encode_line(entry: Dict[str, Any]) -> str:
    """Serialize one entry as a single NDJSON line (with trailing newline)."""
    line = json.dumps(entry, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    try:
        line.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates (a JS string cut mid-emoji) only survive as \u escapes.
        line = json.dumps(entry, ensure_ascii=True, separators=(",", ":"), allow_nan=False)
    return line + "\n"


def parse_ndjson(text: Union[bytes, str]) -> List[Dict[str, Any]]:
    """
    Parse NDJSON content into a list of objects, in file order.

    Raises:
        ValueError: with the 1-based line number of the first bad line.
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8")

    entries: List[Dict[str, Any]] = []
    # split("\n") rather than splitlines(): U+2028 and friends may appear raw
    # inside JSON strings and must not end a record.
    for lineno, raw_line in enumerate(text.split("\n"), start=1):
        line = raw_line.strip()
        if not line:
            continue
        try:
            entries.append(decode_event(line))
        except ValueError as e:
            raise ValueError(f"Invalid NDJSON on line {lineno}: {e}") from e
    return entries
