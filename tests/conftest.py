"""
Root conftest.py for all tests
Provides common fixtures and configuration
"""
import os
import sys

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Settings are read once at import time, so the environment is fixed before any project import
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_storefront"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_storefront_secret"
os.environ["FRONT_URL"] = "https://shop.example.com"
os.environ["LOG_FORMAT"] = "text"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from core.config import get_settings  # noqa: E402
from database.session import get_db  # noqa: E402

# Import all centralized fixtures
from tests.fixtures import *  # noqa: F401,F403,E402


@pytest.fixture
def app_client(session_factory, fake_gateway):
    """
    TestClient for the full application with the test database and the fake
    gateway wired in through dependency overrides.
    """
    from main import app
    from storefront.api import get_payment_gateway

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: fake_gateway
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def settings():
    return get_settings()
