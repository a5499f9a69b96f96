"""ScreenScout — movie, TV and anime discovery API.

This is the main application package. The `create_app()` factory function
initializes the Flask application with all configurations, middleware,
services, and blueprints.
"""
from __future__ import annotations

from typing import Any

import structlog
from flask import Flask
from flask_cors import CORS

from screenscout.config import get_settings, Settings
from screenscout.utils.logger import setup_logging
from screenscout.middleware.request_id import init_request_id_middleware
from screenscout.middleware.error_handlers import register_error_handlers


def create_app(settings: Settings | None = None, db_options: dict[str, Any] | None = None) -> Flask:
    """Application factory pattern.

    Creates and configures the Flask application with:
    - Pydantic-based configuration loading
    - Structured logging (structlog)
    - Request ID middleware
    - Global error handlers
    - CORS configuration
    - MongoDB connection
    - Service initialization (TMDB client, catalog, reviews, accounts)
    - Blueprint registration (health, media, search, auth, reviews)

    Args:
        settings: Settings to use instead of the environment (tests).
        db_options: Extra `mongoengine.connect` options, e.g.
            `{"mongo_client_class": mongomock.MongoClient}`.

    Returns:
        Configured Flask application instance.

    Raises:
        ConfigurationError: If MONGO_URI is not set.
    """
    # Load validated config
    settings = settings or get_settings()

    # ── Logging (must be first so all subsequent logs are formatted) ──
    setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)
    logger = structlog.get_logger(__name__)

    # ── Flask app ─────────────────────────────────────────────────────
    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.SECRET_KEY
    app.config["FLASK_DEBUG"] = settings.FLASK_DEBUG
    app.json.sort_keys = False

    # Store settings on app for access in blueprints
    app.config["SETTINGS"] = settings

    # ── Middleware ─────────────────────────────────────────────────────
    init_request_id_middleware(app)
    register_error_handlers(app)

    # ── CORS ──────────────────────────────────────────────────────────
    CORS(app, resources={
        r"/api/*": {"origins": settings.cors_origins},
        r"/health": {"origins": "*"},
    })

    # ── Storage ───────────────────────────────────────────────────────
    from screenscout.db.connection import init_db
    init_db(settings, **(db_options or {}))

    # ── Services ──────────────────────────────────────────────────────
    _init_services(app, settings)

    # ── Startup validation ────────────────────────────────────────────
    _validate_startup(settings, logger)

    # ── Blueprints ────────────────────────────────────────────────────
    from screenscout.routes.health import health_bp
    from screenscout.routes.media import media_bp
    from screenscout.routes.search import search_bp
    from screenscout.routes.auth import auth_bp
    from screenscout.routes.reviews import reviews_bp
    app.register_blueprint(health_bp)
    app.register_blueprint(media_bp)
    app.register_blueprint(search_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(reviews_bp)

    logger.info(
        "app_started",
        env=settings.FLASK_ENV,
        db=settings.MONGO_DB_NAME,
        log_level=settings.LOG_LEVEL,
    )

    return app


def _init_services(app: Flask, settings: Settings) -> None:
    """Initialize the TMDB client, listing cache and domain services.

    All services are stored on `app.config` for access via `current_app`.

    Args:
        app: Flask application instance.
        settings: Application settings.
    """
    from screenscout.api_clients.tmdb_client import TMDBClient
    from screenscout.services.account_service import AccountService
    from screenscout.services.catalog_service import MediaCatalogService
    from screenscout.services.normalizer import MediaNormalizer
    from screenscout.services.review_store import ReviewStore
    from screenscout.utils.cache import TTLCache

    logger = structlog.get_logger(__name__)
    logger.info("initializing_services")

    # TMDB client
    tmdb = TMDBClient(
        api_key=settings.TMDB_API_KEY,
        base_url=settings.TMDB_BASE_URL,
        language=settings.TMDB_LANGUAGE,
        timeout=settings.HTTP_TIMEOUT,
    )

    # Catalog (owns the listing cache for the app's lifetime)
    catalog = MediaCatalogService(
        tmdb,
        TTLCache(ttl_seconds=settings.CACHE_TTL_SECONDS),
        MediaNormalizer(
            image_base_url=settings.TMDB_IMAGE_BASE_URL,
            backdrop_base_url=settings.TMDB_BACKDROP_BASE_URL,
        ),
        max_workers=settings.DETAIL_FETCH_WORKERS,
    )

    # Accounts and reviews
    accounts = AccountService(settings.SECRET_KEY, token_max_age=settings.TOKEN_MAX_AGE_SECONDS)
    reviews = ReviewStore()

    # Store on app config for access via current_app
    app.config["TMDB_CLIENT"] = tmdb
    app.config["CATALOG_SERVICE"] = catalog
    app.config["ACCOUNT_SERVICE"] = accounts
    app.config["REVIEW_STORE"] = reviews

    logger.info("services_initialized")


def _validate_startup(settings: Settings, logger) -> None:
    """Log configuration problems that don't stop the app from serving.

    A missing TMDB key only breaks catalog routes, so it is reported here
    and raised as ConfigurationError when a catalog route is first used.

    Args:
        settings: Application settings instance.
        logger: Structlog logger instance.
    """
    logger.info("startup_validation", phase="begin")

    if not settings.TMDB_API_KEY:
        logger.warning(
            "startup_check_failed",
            dependency="tmdb_api",
            error="TMDB_API_KEY is not set; catalog endpoints will return 500",
        )

    if settings.FLASK_ENV != "production" and settings.SECRET_KEY == "change-me-in-production":
        logger.warning("startup_check_failed", dependency="secret_key", error="using default SECRET_KEY")

    logger.info("startup_validation", phase="complete")
