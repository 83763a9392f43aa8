"""
Telemetry for the moodtrack service.

Request events come from ``TelemetryMiddleware``; managers emit domain events
(``TelemetryEvents``) through ``track_event``. Everything lands in the in-memory dev
buffer, and in Application Insights when a connection string is configured.
"""

from .config import TelemetryConfig, get_telemetry_config
from .context import (
    clear_request_context,
    generate_correlation_id,
    get_request_context,
    set_request_context,
)
from .dev_logger import clear_dev_logs, export_dev_logs, get_dev_logs, set_debug
from .events import TelemetryEvents
from .middleware import TelemetryMiddleware, route_group
from .tracker import flush_telemetry, initialize_telemetry, track_event, track_exception

__all__ = [
    "TelemetryConfig",
    "TelemetryEvents",
    "TelemetryMiddleware",
    "clear_dev_logs",
    "clear_request_context",
    "export_dev_logs",
    "flush_telemetry",
    "generate_correlation_id",
    "get_dev_logs",
    "get_request_context",
    "get_telemetry_config",
    "initialize_telemetry",
    "route_group",
    "set_debug",
    "set_request_context",
    "track_event",
    "track_exception",
]
