"""
Custom exceptions for the storefront backend
Each error carries the HTTP status it is reported with at the API boundary
"""
from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """Base exception for all storefront errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(StorefrontError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: Optional[str] = None, **details):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field": field, **details} if field else details,
            status_code=400,
        )


class NotFoundError(StorefrontError):
    """Raised when a resource is not found"""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            error_code="NOT_FOUND",
            details={"resource": resource, "identifier": str(identifier)},
            status_code=404,
        )


class AuthenticationError(StorefrontError):
    """Raised when a caller cannot be authenticated (e.g. bad webhook signature)"""

    def __init__(self, message: str = "Authentication failed", **details):
        super().__init__(
            message=message,
            error_code="AUTHENTICATION_ERROR",
            details=details,
            status_code=401,
        )


class ExternalAPIError(StorefrontError):
    """Raised when an external API call fails"""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        **details,
    ):
        super().__init__(
            message=f"{provider} API error: {message}",
            error_code="EXTERNAL_API_ERROR",
            details={"provider": provider, "api_status_code": status_code, **details},
            status_code=502,
        )


class PaymentGatewayError(ExternalAPIError):
    """Raised when the payment gateway rejects or fails a request"""

    def __init__(
        self,
        message: str,
        order_id: Optional[str] = None,
        gateway_error_code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(
            provider="stripe",
            message=message,
            status_code=status_code,
            order_id=order_id,
            gateway_error_code=gateway_error_code,
        )
        self.error_code = "PAYMENT_GATEWAY_ERROR"


class ConfigurationError(StorefrontError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details={"setting": setting} if setting else {},
            status_code=500,
        )


class DatabaseError(StorefrontError):
    """Raised when database operations fail"""

    def __init__(self, message: str, operation: Optional[str] = None, **details):
        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            details={"operation": operation, **details} if operation else details,
            status_code=500,
        )
