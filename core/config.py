"""
Configuration management using Pydantic Settings
Handles environment variables and validation
"""
import os
from functools import lru_cache
from typing import Optional

from pydantic import ConfigDict, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Environment
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Application
    app_name: str = "Storefront"
    app_version: str = "0.1.0"

    # Database
    database_url: str = Field(default="sqlite:///./storefront.db")
    database_pool_size: int = Field(default=10)
    database_echo: bool = Field(default=False)

    # Stripe - use SecretStr for sensitive data
    stripe_secret_key: Optional[SecretStr] = Field(default=None)
    stripe_webhook_secret: Optional[SecretStr] = Field(default=None)
    stripe_timeout_seconds: float = Field(default=10.0, gt=0)
    stripe_max_network_retries: int = Field(default=2, ge=0)
    stripe_webhook_tolerance_seconds: int = Field(default=300, ge=0)

    # Checkout
    front_url: str = Field(default="http://localhost:3000")
    currency: str = Field(default="usd")
    max_products_per_checkout: int = Field(default=100, ge=1)

    # Reporting
    revenue_window_days: int = Field(default=365, ge=1)  # last 12 months
    orders_page_size: int = Field(default=10, ge=1)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    # Monitoring
    prometheus_enabled: bool = Field(default=True)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("front_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @field_validator("currency")
    @classmethod
    def lowercase_currency(cls, v):
        return v.lower()

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Validate production-specific settings after all fields are set"""
        if self.environment == "production" and os.getenv("CI") != "true":
            if not self.stripe_secret_key:
                raise ValueError("Stripe secret key required in production")
            if not self.stripe_webhook_secret:
                raise ValueError("Stripe webhook secret required in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def checkout_urls(self, store_id: str) -> tuple:
        """Success and cancel redirect targets for a store's cart page"""
        base = f"{self.front_url}/{store_id}/cart"
        return f"{base}?success=true", f"{base}?canceled=true"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    def model_dump(self, **kwargs):
        """Override to mask sensitive fields when serializing"""
        data = super().model_dump(**kwargs)

        for field in ["stripe_secret_key", "stripe_webhook_secret"]:
            if field in data and data[field]:
                if hasattr(data[field], "get_secret_value"):
                    value = data[field].get_secret_value()
                else:
                    value = str(data[field])

                # Keep first 4 chars for identification
                if len(value) > 4:
                    data[field] = value[:4] + "*" * (len(value) - 4)
                else:
                    data[field] = "*" * len(value)

        return data


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
