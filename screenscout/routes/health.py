"""Health check endpoint for application and dependency monitoring.

Exposes GET /health returning the status of each external dependency.
Used by Docker HEALTHCHECK and monitoring systems.

Response format:
    {
        "status": "healthy" | "degraded",
        "version": "1.0.0",
        "dependencies": {
            "tmdb_api": "ok" | "not configured" | "error: ...",
            "mongodb": "ok" | "error: ...",
        }
    }
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify

import structlog

from screenscout.db.connection import ping_db

logger = structlog.get_logger(__name__)

health_bp = Blueprint("health", __name__)

APP_VERSION = "1.0.0"


@health_bp.route("/health", methods=["GET"])
def health_check():
    """Application health check endpoint.

    Returns:
        200 if all dependencies are healthy.
        503 if any dependency is unhealthy or TMDB is not configured.
    """
    checks: dict[str, str] = {}

    tmdb = current_app.config["TMDB_CLIENT"]
    if not tmdb.configured:
        checks["tmdb_api"] = "not configured"
    elif tmdb.health_check():
        checks["tmdb_api"] = "ok"
    else:
        logger.warning("health_check_failed", dependency="tmdb_api")
        checks["tmdb_api"] = "error: unreachable"

    try:
        ping_db()
        checks["mongodb"] = "ok"
    except Exception as e:
        logger.warning("health_check_failed", dependency="mongodb", error=str(e))
        checks["mongodb"] = f"error: {str(e)}"

    all_healthy = all(v == "ok" for v in checks.values())

    response = {
        "status": "healthy" if all_healthy else "degraded",
        "version": APP_VERSION,
        "dependencies": checks,
    }

    status_code = 200 if all_healthy else 503
    return jsonify(response), status_code
