"""
JSONL event logger.

- Write one JSON object per line
- Output to stdout
- No buffering, no batching
- Records below the configured level are dropped
- No side effects beyond logging
"""

from __future__ import annotations

import json
import sys
import time
from typing import Any, Mapping, Callable


_LEVELS: dict[str, int] = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
}


# ------------------------------------------------------------------
# Explicit output sink (patchable in tests, swappable in later phases)
# ------------------------------------------------------------------

def _stdout_print(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()

_print: Callable[[str], None] = _stdout_print

_min_level: int = _LEVELS["debug"]
_enabled: bool = True


def configure(*, min_level: str = "debug", enabled: bool = True) -> None:
    """
    Apply logging settings from AppConfig.

    Unknown level names fall back to "debug" so nothing is lost silently.
    """
    global _min_level, _enabled  # pylint: disable=global-statement
    _min_level = _LEVELS.get(min_level.lower(), _LEVELS["debug"])
    _enabled = enabled


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def log_event(event: Mapping[str, Any]) -> None:
    """
    Write a single JSONL event to stdout.

    The caller is responsible for:
    - Supplying a fully-formed event dict
    - Including event_type and any correlation fields

    This function:
    - Fills in ts_ms when missing
    - Drops the record if its "level" is below the configured minimum
    - Serializes to JSON
    - Writes exactly one line
    - Never raises
    """
    if not _enabled:
        return

    level = str(event.get("level", "info"))
    if _LEVELS.get(level, _LEVELS["info"]) < _min_level:
        return

    payload: dict[str, Any] = dict(event)
    payload.setdefault("ts_ms", now_ms())

    try:
        line = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        # Last-resort fallback: logging must never crash the runtime
        fallback: dict[str, Any] = {
            "ts_ms": payload.get("ts_ms"),
            "event_type": "LOGGER_SERIALIZATION_ERROR",
            "level": "error",
            "error": str(e),
            "original_event_repr": repr(event),
        }
        line = json.dumps(fallback, ensure_ascii=False, separators=(",", ":"))

    _print(line)
