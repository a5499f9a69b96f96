"""TMDB (The Movie Database) v3 API client.

Base URL: https://api.themoviedb.org/3
Auth: `api_key` query parameter on every request

This is the only place in the application that talks to TMDB over the
network. It returns raw JSON; normalization lives in
`screenscout.services.normalizer` and caching in the catalog service.

Features:
- Persistent connection pooling via httpx.Client (safe to share across threads)
- Bounded request timeout, surfaced as a retryable UpstreamTimeoutError
- Single attempt per call; retry policy belongs to the caller
- Structured logging for every request/response (API key never logged)
- Fails fast with ConfigurationError when no API key is configured
"""
from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

from screenscout.utils.exceptions import (
    ConfigurationError,
    UpstreamError,
    UpstreamTimeoutError,
)

logger = structlog.get_logger(__name__)

# Upstream statuses worth retrying from the client side
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class TMDBClient:
    """Thin synchronous client for the TMDB v3 REST API.

    Args:
        api_key: TMDB v3 API key. May be empty; calls then raise
            ConfigurationError before any network I/O.
        base_url: The API's base URL (no trailing slash).
        language: Language code sent with every request.
        timeout: HTTP request timeout in seconds.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.themoviedb.org/3",
        language: str = "en-US",
        timeout: int = 10,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._language = language
        self._timeout = timeout

        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout, connect=5),
            headers={
                "Accept": "application/json",
                "User-Agent": "ScreenScout/1.0 (media-discovery)",
            },
            follow_redirects=True,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def close(self) -> None:
        """Close the underlying HTTP client and release connections."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # ── Public API ────────────────────────────────────────────────────

    def get(self, endpoint: str, params: dict[str, Any] | None = None) -> dict:
        """Make a single authenticated GET request.

        Args:
            endpoint: API endpoint path (e.g., "/movie/550/credits").
            params: Extra query parameters; None values are dropped.

        Returns:
            Parsed JSON response as a dict.

        Raises:
            ConfigurationError: If no API key is configured.
            UpstreamTimeoutError: On request timeout.
            UpstreamError: On transport failure or non-2xx status.
        """
        if not self._api_key:
            raise ConfigurationError(
                "TMDB_API_KEY is not set. Add it to the environment or .env file."
            )

        query = {"language": self._language}
        query.update({k: v for k, v in (params or {}).items() if v is not None})

        logger.info("tmdb_request", endpoint=endpoint, params=query)
        start = time.monotonic()

        try:
            response = self._client.get(endpoint, params={**query, "api_key": self._api_key})
        except httpx.TimeoutException as e:
            logger.warning("tmdb_timeout", endpoint=endpoint, timeout=self._timeout)
            raise UpstreamTimeoutError(endpoint=endpoint, timeout=self._timeout) from e
        except httpx.HTTPError as e:
            logger.warning("tmdb_transport_error", endpoint=endpoint, error=str(e))
            raise UpstreamError(
                message=f"TMDB request to {endpoint} failed: {e.__class__.__name__}",
                retryable=True,
            ) from e

        duration_ms = round((time.monotonic() - start) * 1000)
        logger.info(
            "tmdb_response",
            endpoint=endpoint,
            status=response.status_code,
            duration_ms=duration_ms,
        )

        if response.status_code >= 400:
            raise UpstreamError(
                message=f"TMDB: HTTP {response.status_code} for {endpoint}: {self._status_message(response)}",
                upstream_status=response.status_code,
                retryable=response.status_code in RETRYABLE_STATUS_CODES,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                message=f"TMDB returned a non-JSON body for {endpoint}",
                upstream_status=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise UpstreamError(
                message=f"TMDB returned an unexpected payload for {endpoint}",
                upstream_status=response.status_code,
            )
        return data

    def health_check(self) -> bool:
        """Verify TMDB is reachable with the configured key. Used by /health."""
        try:
            self.get("/configuration")
            return True
        except Exception:
            return False

    # ── Internal Methods ──────────────────────────────────────────────

    @staticmethod
    def _status_message(response: httpx.Response) -> str:
        """Extract TMDB's `status_message` from an error body, if any."""
        try:
            body = response.json()
        except ValueError:
            return response.reason_phrase or "error"
        if isinstance(body, dict) and body.get("status_message"):
            return str(body["status_message"])
        return response.reason_phrase or "error"
