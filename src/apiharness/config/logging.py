"""Logging configuration using structlog."""

import logging
import sys

import structlog

from apiharness.config.settings import HarnessSettings, get_settings


def configure_logging(settings: HarnessSettings | None = None) -> None:
    """Configure structlog for the harness."""
    settings = settings or get_settings()

    # Set log level
    log_level = getattr(logging, settings.log_level)

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            # Use JSON by default, pretty print in debug
            structlog.dev.ConsoleRenderer()
            if settings.debug
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx logs every request at INFO through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
