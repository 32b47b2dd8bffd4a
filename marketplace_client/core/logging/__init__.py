"""
Logging configuration module for structured logging.

This module configures the package's logging system using structlog.
It provides JSON output for log shipping and human-readable console output
for development, selected by the LOG_JSON setting.
"""

import logging

import structlog

from marketplace_client.core.config.settings import settings


def configure_logging(log_level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configures the package's logging system.

    This function sets up structlog with:
    1. ISO format timestamps
    2. Log level inclusion
    3. JSON formatting (LOG_JSON=True) or console formatting
    4. Standard library logger factory, filtered at LOG_LEVEL

    Arguments left as None fall back to the settings values.
    """
    level_name = (log_level or settings.LOG_LEVEL).upper()
    render_json = settings.LOG_JSON if json_logs is None else json_logs

    logging.basicConfig(format="%(message)s", level=getattr(logging, level_name, logging.INFO))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer() if render_json else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def mask_email(email: str | None) -> str:
    """Return an e-mail address safe for log output (``joh***@example.com``)."""
    if not email or "@" not in email:
        return "***"
    local, domain = email.split("@", 1)
    return f"{local[:3]}***@{domain}"


logger = structlog.get_logger()
