"""Shared pytest fixtures for the ScreenScout test suite.

Provides reusable fixtures for:
- Test settings (no .env, fake TMDB key, in-memory MongoDB)
- Flask app and test client
- A standalone mongomock connection for service tests
- Registered users with bearer tokens
"""
import mongomock
import pytest

from screenscout import create_app
from screenscout.config import Settings
from screenscout.db.connection import close_db, init_db
from screenscout.db.models import Review, User

MOCK_DB = {"mongo_client_class": mongomock.MongoClient}


@pytest.fixture
def settings():
    """Settings isolated from the developer's environment."""
    return Settings(
        _env_file=None,
        FLASK_ENV="testing",
        FLASK_DEBUG=False,
        SECRET_KEY="test-secret-key",
        TMDB_API_KEY="test-tmdb-key",
        MONGO_URI="mongodb://localhost:27017",
        MONGO_DB_NAME="screenscout_test",
        LOG_LEVEL="WARNING",
        LOG_FORMAT="console",
    )


@pytest.fixture
def mongo(settings):
    """Connect mongoengine to a fresh in-memory database."""
    init_db(settings, **MOCK_DB)
    yield
    Review.drop_collection()
    User.drop_collection()
    close_db()


@pytest.fixture
def app(settings):
    """Create a Flask application instance for testing."""
    app = create_app(settings, db_options=MOCK_DB)
    app.config["TESTING"] = True
    yield app
    app.config["CATALOG_SERVICE"].close()
    Review.drop_collection()
    User.drop_collection()
    close_db()


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()


@pytest.fixture
def make_user(client):
    """Register an account and return (user_id, auth headers)."""

    def _make(email: str = "ada@example.com", password: str = "hunter22"):
        resp = client.post("/api/auth/register", json={"email": email, "password": password})
        assert resp.status_code == 201
        user_id = resp.get_json()["userId"]

        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200
        token = resp.get_json()["token"]
        return user_id, {"Authorization": f"Bearer {token}"}

    return _make
