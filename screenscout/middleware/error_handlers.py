"""Global Flask error handlers for consistent JSON error responses.

Registers handlers for standard HTTP errors and custom ScreenScoutError
exceptions, ensuring the API always returns:
    { "success": false, "error": { "message": "...", "code": <int>, ... } }

Upstream failures add `upstream_status` and `retryable` to the error
object so clients can tell "TMDB is down" from "no results".

Usage:
    from screenscout.middleware.error_handlers import register_error_handlers
    register_error_handlers(app)
"""
from __future__ import annotations

from typing import Any

import structlog
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from screenscout.utils.exceptions import ScreenScoutError

logger = structlog.get_logger(__name__)


def _error_response(message: str, code: int, details: dict[str, Any] | None = None):
    """Create a standardized JSON error response.

    Args:
        message: Human-readable error message.
        code: HTTP status code.
        details: Extra diagnostic fields for the error object.

    Returns:
        Tuple of (response, status_code).
    """
    error: dict[str, Any] = {"message": message, "code": code}
    if details:
        error.update(details)
    return jsonify({"success": False, "error": error}), code


def register_error_handlers(app: Flask) -> None:
    """Register global error handlers on the Flask app.

    Args:
        app: Flask application instance.
    """

    # ── Standard HTTP Errors ──────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return _error_response("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return _error_response("Method not allowed", 405)

    @app.errorhandler(500)
    def internal_error(e):
        logger.error("unhandled_server_error", error=str(e), exc_info=True)
        return _error_response("Internal server error", 500)

    # ── Custom Application Errors ─────────────────────────────────────

    @app.errorhandler(ScreenScoutError)
    def handle_app_error(e: ScreenScoutError):
        """Handle all custom ScreenScoutError exceptions.

        Client mistakes (4xx) are routine and logged at info; server-side
        and upstream failures are logged as warnings.
        """
        log = logger.warning if e.status_code >= 500 else logger.info
        log(
            "request_failed",
            error=e.message,
            error_type=type(e).__name__,
            status_code=e.status_code,
        )
        return _error_response(e.message, e.status_code, e.details)

    # ── Catch-all for unexpected Werkzeug HTTP exceptions ─────────────

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        """Catch any HTTPException not explicitly handled above."""
        return _error_response(e.description or "Unknown error", e.code or 500)

    # ── Catch-all for truly unhandled exceptions ──────────────────────

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        """Last resort handler for unhandled exceptions."""
        logger.error(
            "unexpected_error",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return _error_response("An unexpected error occurred", 500)
