"""
Test Fixtures Package

Provides centralized fixtures for test isolation and setup:
- Database fixtures (db_engine, session_factory, db_session, store)
- Payment gateway fakes and webhook signing helpers
"""

from .database import db_engine, db_session, session_factory, store
from .payments import failing_gateway, fake_gateway

__all__ = [
    "db_engine",
    "session_factory",
    "db_session",
    "store",
    "fake_gateway",
    "failing_gateway",
]
