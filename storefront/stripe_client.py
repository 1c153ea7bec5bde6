"""
Payment gateway integration

The gateway is an injected collaborator: checkout and webhook processing take a
PaymentGateway instance, and StripeGateway is the production implementation on
top of the Stripe SDK. Each StripeGateway owns its own ``stripe.StripeClient``,
so no API key or HTTP client is ever installed on the ``stripe`` module itself.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Sequence

import stripe

from core.config import Settings
from core.exceptions import AuthenticationError, ConfigurationError, PaymentGatewayError
from core.logging import get_logger
from core.metrics import metrics

from .order_store import LineItem

logger = get_logger(__name__, component="stripe")

SIGNATURE_HEADER = "Stripe-Signature"
ORDER_ID_METADATA_KEY = "order_id"


@dataclass(frozen=True)
class HostedSession:
    """A gateway-hosted payment page bound to one order"""

    session_id: str
    url: str
    amount_total: Optional[int] = None  # cents, as reported by the gateway


class PaymentGateway(ABC):
    """Outbound session creation and inbound notification authentication"""

    @abstractmethod
    def create_hosted_session(
        self,
        line_items: Sequence[LineItem],
        order_id: str,
        success_url: str,
        cancel_url: str,
    ) -> HostedSession:
        """Create a hosted payment session tagged with ``order_id``"""

    @abstractmethod
    def verify_signature(self, payload: bytes, signature: Optional[str]) -> None:
        """Raise AuthenticationError unless ``signature`` signs ``payload``"""


class StripeConfig:
    """Configuration for the Stripe integration"""

    def __init__(
        self,
        secret_key: Optional[str],
        webhook_secret: Optional[str],
        currency: str = "usd",
        timeout_seconds: float = 10.0,
        max_network_retries: int = 2,
        webhook_tolerance_seconds: int = stripe.Webhook.DEFAULT_TOLERANCE,
    ):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.currency = currency
        self.timeout_seconds = timeout_seconds
        self.max_network_retries = max_network_retries
        self.webhook_tolerance_seconds = webhook_tolerance_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeConfig":
        return cls(
            secret_key=settings.stripe_secret_key.get_secret_value() if settings.stripe_secret_key else None,
            webhook_secret=settings.stripe_webhook_secret.get_secret_value()
            if settings.stripe_webhook_secret
            else None,
            currency=settings.currency,
            timeout_seconds=settings.stripe_timeout_seconds,
            max_network_retries=settings.stripe_max_network_retries,
            webhook_tolerance_seconds=settings.stripe_webhook_tolerance_seconds,
        )


class StripeGateway(PaymentGateway):
    """PaymentGateway backed by Stripe Checkout"""

    def __init__(self, config: StripeConfig, client: Optional[stripe.StripeClient] = None):
        self.config = config
        self._client = client

    @property
    def client(self) -> stripe.StripeClient:
        # Built lazily so webhook verification works without an API key
        if self._client is None:
            if not self.config.secret_key:
                raise ConfigurationError("Stripe secret key is not configured", setting="stripe_secret_key")
            self._client = stripe.StripeClient(
                self.config.secret_key,
                http_client=stripe.RequestsClient(timeout=self.config.timeout_seconds),
                max_network_retries=self.config.max_network_retries,
            )
        return self._client

    def create_hosted_session(
        self,
        line_items: Sequence[LineItem],
        order_id: str,
        success_url: str,
        cancel_url: str,
    ) -> HostedSession:
        params = {
            "mode": "payment",
            "line_items": [create_one_time_line_item(item, self.config.currency) for item in line_items],
            "metadata": {ORDER_ID_METADATA_KEY: order_id},
            # Copied onto the payment intent so the order can be traced from the dashboard
            "payment_intent_data": {"metadata": {ORDER_ID_METADATA_KEY: order_id}},
            "client_reference_id": order_id,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }

        started = time.monotonic()
        try:
            session = self.client.checkout.sessions.create(params=params)
        except stripe.StripeError as e:
            logger.error(f"Stripe rejected checkout session for order {order_id}: {e.user_message or e}")
            raise PaymentGatewayError(
                "Failed to create checkout session",
                order_id=order_id,
                gateway_error_code=e.code,
                status_code=e.http_status,
            ) from e
        finally:
            metrics.track_gateway_call(time.monotonic() - started)

        logger.info(f"Created checkout session {session.id} for order {order_id}")
        return HostedSession(session_id=session.id, url=session.url, amount_total=session.amount_total)

    def verify_signature(self, payload: bytes, signature: Optional[str]) -> None:
        if not self.config.webhook_secret:
            raise ConfigurationError("Stripe webhook secret is not configured", setting="stripe_webhook_secret")
        if not signature:
            raise AuthenticationError("Missing Stripe signature")

        try:
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"),
                signature,
                self.config.webhook_secret,
                tolerance=self.config.webhook_tolerance_seconds,
            )
        except UnicodeDecodeError as e:
            raise AuthenticationError("Webhook payload is not valid UTF-8") from e
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Invalid webhook signature: {e}")
            raise AuthenticationError("Invalid Stripe signature") from e


def format_amount_for_stripe(amount: Decimal) -> int:
    """Convert a USD amount to integer cents"""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def create_one_time_line_item(item: LineItem, currency: str = "usd") -> Dict[str, Any]:
    """Inline-priced Checkout line item; no Stripe product catalog is required"""
    return {
        "price_data": {
            "currency": currency,
            "product_data": {"name": item.name, "metadata": {"product_id": item.product_id}},
            "unit_amount": format_amount_for_stripe(item.unit_price),
        },
        "quantity": item.quantity,
    }


def line_items_total(line_items: Sequence[LineItem]) -> Decimal:
    return sum((item.total_price for item in line_items), Decimal("0.00"))
