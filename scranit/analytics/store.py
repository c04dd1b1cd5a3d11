"""
In-process log of search, nearby and location events.

Only the most recent ``MAX_EVENTS`` are kept; older ones fall off the front.
"""
from __future__ import annotations

import time
from collections import deque
from typing import Any

MAX_EVENTS = 10_000

_events: deque[dict[str, Any]] = deque(maxlen=MAX_EVENTS)


def record_event(kind: str, fields: dict[str, Any]) -> None:
    _events.append({"type": kind, "timestamp": time.time(), **fields})


def get_events() -> list[dict[str, Any]]:
    """Snapshot of the retained events, oldest first."""
    return list(_events)


def clear_events() -> None:
    _events.clear()
