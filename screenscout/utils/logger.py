"""Structured logging configuration using structlog.

Provides centralized logging setup with:
- JSON output in production, colored console output in development
- Automatic request_id binding via contextvars
- Timestamp and log level on every log line
- Quieter third-party loggers (httpx, pymongo) unless running at DEBUG

Usage:
    from screenscout.utils.logger import setup_logging

    setup_logging(log_level="INFO", log_format="json")

    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("review_created", media_id="550")
"""
from __future__ import annotations

import logging

import structlog

# Libraries that log every request/heartbeat at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "pymongo", "werkzeug")


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structlog for the entire application.

    Args:
        log_level: Logging level — DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_format: Output format — 'json' for production, 'console' for dev.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,       # request_id, method, path
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=level)
    if level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
