"""
Storefront orders and payments

Checkout orchestration against Stripe Checkout, payment confirmation webhooks,
and revenue reporting over paid orders.
"""

from .catalog import CatalogReader, PurchasableProduct
from .checkout import CheckoutManager, CheckoutResult
from .models import Order, OrderItem, OrderStatus
from .order_store import LineItem, OrderStore
from .revenue import RevenueAggregator, RevenueReport
from .stripe_client import HostedSession, PaymentGateway, StripeConfig, StripeGateway
from .webhooks import (
    CheckoutSessionCompleted,
    CheckoutSessionObject,
    UnhandledEvent,
    WebhookEventType,
    WebhookProcessor,
    WebhookResult,
    WebhookStatus,
    parse_notification,
)

__all__ = [
    # Models
    "Order",
    "OrderItem",
    "OrderStatus",
    # Persistence and catalog
    "OrderStore",
    "LineItem",
    "CatalogReader",
    "PurchasableProduct",
    # Payment gateway
    "PaymentGateway",
    "StripeGateway",
    "StripeConfig",
    "HostedSession",
    # Checkout flow
    "CheckoutManager",
    "CheckoutResult",
    # Webhook processing
    "WebhookProcessor",
    "WebhookEventType",
    "WebhookStatus",
    "WebhookResult",
    "CheckoutSessionCompleted",
    "CheckoutSessionObject",
    "UnhandledEvent",
    "parse_notification",
    # Reporting
    "RevenueAggregator",
    "RevenueReport",
]
