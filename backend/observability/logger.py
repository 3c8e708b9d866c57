"""
JSONL event logger.

- Write one JSON object per line
- Output to stdout
- No buffering, no batching
- Can be silenced with ENABLE_JSON_LOGS=0 (see configure())
"""

from __future__ import annotations

import json
import sys
import time
from typing import Any, Mapping, Callable


# ------------------------------------------------------------------
# Explicit output sink (patchable in tests)
# ------------------------------------------------------------------

def _stdout_print(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def _discard(line: str) -> None:  # pylint: disable=unused-argument
    return None


_print: Callable[[str], None] = _stdout_print


def configure(*, enabled: bool) -> None:
    """
    Enable or silence JSONL output for the whole process.

    Called once at startup from the loaded AppConfig.
    """
    global _print  # pylint: disable=global-statement
    _print = _stdout_print if enabled else _discard


def log_event(event: Mapping[str, Any]) -> None:
    """
    Write a single JSONL event to the configured sink.

    Events without ts_ms are stamped with the current wall-clock time;
    a caller-supplied ts_ms is kept as-is.

    Never raises: a payload that cannot be serialized is replaced by a
    LOGGER_SERIALIZATION_ERROR line that keeps its ts_ms and event_type.
    """
    record: dict[str, Any] = {"ts_ms": _now_ms(), **event}

    try:
        line = _encode(record)
    except (TypeError, ValueError) as e:
        # Logging must never crash a dispatch
        line = _encode({
            "ts_ms": record["ts_ms"] if isinstance(record["ts_ms"], int) else None,
            "event_type": "LOGGER_SERIALIZATION_ERROR",
            "original_event_type": str(record.get("event_type")),
            "error": str(e),
            "original_event_repr": repr(event),
        })

    _print(line)


def _encode(record: Mapping[str, Any]) -> str:
    return json.dumps(record, ensure_ascii=False, separators=(",", ":"))


def _now_ms() -> int:
    return time.time_ns() // 1_000_000
