"""Core utilities and configuration for the storefront backend"""
from core.config import settings
from core.exceptions import (
    AuthenticationError,
    DatabaseError,
    NotFoundError,
    PaymentGatewayError,
    StorefrontError,
    ValidationError,
)
from core.logging import get_logger

__all__ = [
    "settings",
    "get_logger",
    "StorefrontError",
    "ValidationError",
    "NotFoundError",
    "AuthenticationError",
    "DatabaseError",
    "PaymentGatewayError",
]
