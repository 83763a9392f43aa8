"""
Development Logger

Keeps recent telemetry events in a bounded in-memory buffer for local debugging.
"""

import json
from collections import deque
from datetime import UTC, datetime
from typing import Any

from .config import get_telemetry_config

_debug_enabled = False
_event_buffer: deque[dict[str, Any]] = deque(maxlen=get_telemetry_config().dev_logger_max_events)


def set_debug(enabled: bool) -> None:
    """Enable or disable debug console output."""
    global _debug_enabled
    _debug_enabled = enabled


def log_dev_event(event_name: str, properties: dict[str, Any]) -> None:
    """Record an event; the oldest events drop off once the buffer is full."""
    if not get_telemetry_config().enable_dev_logger:
        return

    _event_buffer.append(
        {
            "timestamp": datetime.now(UTC).isoformat(),
            "event_name": event_name,
            "properties": properties,
        }
    )

    if _debug_enabled:
        print(f"[Telemetry] {event_name}: {json.dumps(properties, default=str)}")


def export_dev_logs() -> str:
    """Export all logged events as JSON Lines."""
    return "\n".join(json.dumps(event, default=str) for event in _event_buffer)


def get_dev_logs() -> list[dict[str, Any]]:
    """Get all logged events as a list."""
    return list(_event_buffer)


def clear_dev_logs() -> None:
    """Clear all logged events."""
    _event_buffer.clear()
