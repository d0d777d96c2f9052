"""
Global pytest configuration and fixtures for all tests.

Unit tests never touch a real database: every test patches get_db_session
(or the service function) in the module under test.
"""

from unittest.mock import MagicMock

import pytest

from src.admin.app import create_app

OPERATOR_EMAIL = "ops@example.com"


@pytest.fixture(autouse=True, scope="function")
def test_environment(monkeypatch):
    """Configure test environment variables without global pollution."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("PRODUCTION", raising=False)
    monkeypatch.delenv("BASE_DOMAIN", raising=False)
    monkeypatch.delenv("SESSION_COOKIE_DOMAIN", raising=False)
    monkeypatch.setenv("FLASK_SECRET_KEY", "test_secret_key")
    monkeypatch.setenv("ADMIN_EMAIL", OPERATOR_EMAIL)
    monkeypatch.setenv("ADMIN_PASSWORD", "correct-horse")

    yield

    # Cleanup: Reset engine to ensure clean state for next test
    from src.core.database.database_session import reset_engine

    reset_engine()


@pytest.fixture
def test_app():
    """Create a test Flask application."""
    return create_app({"TESTING": True})


@pytest.fixture
def test_client(test_app):
    """Create a test client."""
    return test_app.test_client()


@pytest.fixture
def operator_client(test_app):
    """Create a test client logged in as the agency operator."""
    client = test_app.test_client()
    with client.session_transaction() as sess:
        sess["user"] = OPERATOR_EMAIL
    return client


@pytest.fixture
def mock_db_session():
    """Create a mock database session."""
    return MagicMock()

