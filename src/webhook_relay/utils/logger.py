"""
Module: logger.py
Description: Structured logging configuration for the webhook relay.

Configures structlog for JSON output optimized for CloudWatch Logs.
Provides consistent logging across all modules with proper context
and structured data.

Key Components:
- JSON output for CloudWatch compatibility
- Timestamp and log level processors
- Level filtering driven by settings.log_level
- get_logger() helper function

Dependencies: structlog, datetime
Author: Webhook Relay Team
"""

import logging
from datetime import datetime, timezone

import structlog
from structlog.typing import FilteringBoundLogger

from webhook_relay.config.settings import settings


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """
    Add log level to event dictionary.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with level
    """
    # exception() is logged at error level
    event_dict["level"] = "ERROR" if method_name == "exception" else method_name.upper()
    return event_dict


# Configure structlog for JSON output optimized for CloudWatch
structlog.configure(
    processors=[
        # Add timestamp and log level
        _add_timestamp,
        _add_log_level,
        # Add exception information
        structlog.processors.format_exc_info,
        # Render as JSON for CloudWatch compatibility
        structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.WriteLoggerFactory(),
    # Drop entries below the configured level before any processing
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.log_level)
    ),
    # Cache logger on first use for performance
    cache_logger_on_first_use=True,
)


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Creates a logger with the specified name that outputs JSON
    formatted logs suitable for CloudWatch Logs ingestion.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Webhook delivered", event_id="evt_123", status_code=200)
        {"event_id": "evt_123", "status_code": 200, "event": "Webhook delivered", "timestamp": "2024-01-15T10:30:00.000000Z", "level": "INFO"}
    """
    return structlog.get_logger(name)
