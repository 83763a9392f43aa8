"""
Application Insights Telemetry Tracker

Ships custom events and exceptions to Azure Application Insights through the
opencensus log exporter when a connection string is configured. Events are always
mirrored into the dev logger.
"""

import logging
from typing import Any

from opencensus.ext.azure.log_exporter import AzureLogHandler

from .config import get_telemetry_config
from .context import get_request_context
from .dev_logger import log_dev_event

logger = logging.getLogger(__name__)

_app_insights_logger: logging.Logger | None = None


def initialize_telemetry() -> logging.Logger | None:
    """
    Initialize Application Insights telemetry.

    Call this once at application startup.

    Returns:
        Logger instance if successful, None if disabled or connection string missing
    """
    global _app_insights_logger

    if _app_insights_logger is not None:
        return _app_insights_logger

    config = get_telemetry_config()

    if not config.enabled:
        logger.info("Telemetry disabled by configuration")
        return None

    if not config.app_insights_connection_string:
        logger.warning("No Application Insights connection string found. Telemetry disabled.")
        return None

    try:
        insights_logger = logging.getLogger("moodtrack_telemetry")
        insights_logger.setLevel(logging.INFO)
        insights_logger.propagate = False

        azure_handler = AzureLogHandler(connection_string=config.app_insights_connection_string)

        def add_context(envelope: Any) -> bool:
            envelope.data.baseData.properties.update(get_request_context())
            envelope.data.baseData.properties["app_id"] = config.app_id
            envelope.data.baseData.properties["environment"] = config.environment
            return True

        azure_handler.add_telemetry_processor(add_context)
        insights_logger.addHandler(azure_handler)
        _app_insights_logger = insights_logger

        logger.info("Application Insights initialized successfully")
        return insights_logger

    except ValueError as e:
        # Raised by the exporter for a malformed connection string
        logger.error(f"Failed to initialize Application Insights: {e}")
        return None


def _merge_properties(properties: dict[str, Any] | None) -> dict[str, Any]:
    config = get_telemetry_config()
    return {
        **get_request_context(),
        "app_id": config.app_id,
        "environment": config.environment,
        **(properties or {}),
    }


def track_event(name: str, properties: dict[str, Any] | None = None) -> None:
    """
    Track a custom event.

    Request context and app identity are merged into ``properties``.
    """
    merged = _merge_properties(properties)
    log_dev_event(name, merged)

    if _app_insights_logger:
        _app_insights_logger.info(name, extra={"custom_dimensions": merged})


def track_exception(
    exception: Exception, properties: dict[str, Any] | None = None, level: str = "ERROR"
) -> None:
    """Track an exception with its type and message."""
    merged = _merge_properties(
        {
            "error_type": type(exception).__name__,
            "error_message": str(exception),
            **(properties or {}),
        }
    )
    log_dev_event("exception", merged)

    if _app_insights_logger:
        _app_insights_logger.log(
            getattr(logging, level.upper(), logging.ERROR),
            f"Exception: {type(exception).__name__}",
            exc_info=exception,
            extra={"custom_dimensions": merged},
        )


def flush_telemetry() -> None:
    """Flush telemetry immediately (useful before application shutdown)."""
    if _app_insights_logger:
        for handler in _app_insights_logger.handlers:
            handler.flush()
