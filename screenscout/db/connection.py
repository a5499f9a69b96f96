"""MongoDB connection management for mongoengine documents."""
from __future__ import annotations

from typing import Any

import structlog
from mongoengine import connect, disconnect
from mongoengine.connection import get_db

from screenscout.config import Settings
from screenscout.utils.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

DB_ALIAS = "default"


def init_db(settings: Settings, **options: Any) -> None:
    """Register the default mongoengine connection.

    Args:
        settings: Application settings (MONGO_URI, MONGO_DB_NAME).
        **options: Extra client options passed to `mongoengine.connect`
            (e.g. `mongo_client_class` in tests).

    Raises:
        ConfigurationError: If MONGO_URI is not set.
    """
    if not settings.MONGO_URI:
        raise ConfigurationError(
            "MONGO_URI is not set. Add a MongoDB connection string to the environment or .env file."
        )

    disconnect(alias=DB_ALIAS)
    connect(
        db=settings.MONGO_DB_NAME,
        host=settings.MONGO_URI,
        alias=DB_ALIAS,
        tz_aware=True,
        **options,
    )
    logger.info("mongo_connected", db=settings.MONGO_DB_NAME)


def close_db() -> None:
    """Drop the default connection (used by tests and shutdown hooks)."""
    disconnect(alias=DB_ALIAS)


def ping_db() -> bool:
    """Round-trip to the server. Used by /health."""
    get_db(DB_ALIAS).command("ping")
    return True
