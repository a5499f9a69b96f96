"""Bearer-token authentication for review endpoints.

Usage:
    from screenscout.middleware.auth import require_auth

    @reviews_bp.route("/api/reviews", methods=["POST"])
    @require_auth
    def create_review():
        user_id = g.user_id
"""
from __future__ import annotations

from functools import wraps

import structlog
from flask import current_app, g, request

from screenscout.utils.exceptions import AuthError


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthError("Missing bearer token")
    return token


def require_auth(view):
    """Reject the request with 401 unless it carries a valid bearer token.

    On success the caller's account id is available as `g.user_id` and is
    bound to the structlog context for the rest of the request.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        accounts = current_app.config["ACCOUNT_SERVICE"]
        g.user_id = accounts.verify_token(_bearer_token())
        structlog.contextvars.bind_contextvars(user_id=g.user_id)
        return view(*args, **kwargs)

    return wrapper
