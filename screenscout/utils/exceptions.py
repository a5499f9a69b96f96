"""Custom exception hierarchy for the ScreenScout application.

All application-specific exceptions inherit from ScreenScoutError,
enabling uniform error handling in the global error handlers.

Hierarchy:
    ScreenScoutError (base)
    ├── ConfigurationError              — Missing API key / connection string
    ├── UpstreamError                   — TMDB call failed or returned non-2xx
    │   └── UpstreamTimeoutError        — TMDB request timed out
    ├── InputValidationError            — Malformed user input
    ├── DuplicateReviewError            — Second review for the same media
    ├── NotFoundError                   — Target resource does not exist
    │   └── NotFoundOrUnauthorizedError — Missing OR owned by someone else
    ├── AuthError                       — Missing / invalid bearer credential
    └── AccountExistsError              — E-mail already registered
"""
from __future__ import annotations

from typing import Any


class ScreenScoutError(Exception):
    """Base exception for the ScreenScout application."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    @property
    def details(self) -> dict[str, Any]:
        """Extra diagnostic fields merged into the JSON error body."""
        return {}


class ConfigurationError(ScreenScoutError):
    """Raised when a required credential or connection string is missing."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=500)


# ── Upstream (TMDB) Errors ────────────────────────────────────────────

class UpstreamError(ScreenScoutError):
    """Raised when a TMDB call fails or returns a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        upstream_status: int | None = None,
        retryable: bool = False,
    ) -> None:
        self.upstream_status = upstream_status
        self.retryable = retryable
        super().__init__(message, status_code)

    @property
    def details(self) -> dict[str, Any]:
        return {"upstream_status": self.upstream_status, "retryable": self.retryable}


class UpstreamTimeoutError(UpstreamError):
    """Raised when a TMDB request times out."""

    def __init__(self, endpoint: str, timeout: float) -> None:
        super().__init__(
            message=f"TMDB request to {endpoint} timed out after {timeout}s.",
            status_code=504,
            retryable=True,
        )


# ── Input Errors ──────────────────────────────────────────────────────

class InputValidationError(ScreenScoutError):
    """Raised when user input fails validation."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400)


# ── Review Errors ─────────────────────────────────────────────────────

class DuplicateReviewError(ScreenScoutError):
    """Raised when a user already has a review for the media item."""

    def __init__(self, media_id: str) -> None:
        self.media_id = media_id
        super().__init__(
            message=f"You have already reviewed media '{media_id}'. Edit your existing review instead.",
            status_code=409,
        )


class NotFoundError(ScreenScoutError):
    """Raised when the requested resource does not exist."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=404)


class NotFoundOrUnauthorizedError(NotFoundError):
    """Raised when a resource is missing or not owned by the caller.

    The two cases share one message so callers cannot probe for other
    users' review ids.
    """

    def __init__(self, resource: str = "Review") -> None:
        super().__init__(f"{resource} not found")


# ── Account Errors ────────────────────────────────────────────────────

class AuthError(ScreenScoutError):
    """Raised when a bearer credential or login is missing or invalid."""

    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(message, status_code=401)


class AccountExistsError(ScreenScoutError):
    """Raised when registering an e-mail that is already taken."""

    def __init__(self) -> None:
        super().__init__("User already exists", status_code=409)
