"""Request ID middleware for log correlation.

Injects a unique X-Request-ID into every incoming request, enabling
log correlation across the full request lifecycle. If the client sends
an X-Request-ID header, it is reused; otherwise a new UUID is generated.

Usage:
    from screenscout.middleware.request_id import init_request_id_middleware
    init_request_id_middleware(app)
"""
from __future__ import annotations

import time
import uuid

import structlog
from flask import Flask, g, request


def init_request_id_middleware(app: Flask) -> None:
    """Register before/after hooks for request ID tracing and timing.

    Args:
        app: Flask application instance.
    """
    logger = structlog.get_logger(__name__)

    @app.before_request
    def inject_request_id() -> None:
        """Inject request ID into Flask's g object and structlog context."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        g.request_id = request_id
        g.request_started = time.monotonic()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.path,
        )

        logger.debug("request_started")

    @app.after_request
    def attach_request_id(response):
        """Attach request ID to response headers and log completion."""
        response.headers["X-Request-ID"] = g.get("request_id", "unknown")

        started = g.get("request_started")
        logger.info(
            "request_completed",
            status=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000) if started else None,
        )
        return response
