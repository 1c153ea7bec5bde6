"""
Storefront API

Checkout, order listing, revenue and payment webhook endpoints. Collaborators
are wired per request through FastAPI dependencies so tests can swap the
payment gateway or the database session.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from core.config import Settings, get_settings
from core.exceptions import ValidationError
from core.logging import get_logger
from database.session import get_db

from .catalog import CatalogReader
from .checkout import CheckoutManager
from .order_store import OrderStore
from .revenue import RevenueAggregator
from .schemas import CheckoutCreateRequest, CheckoutCreateResponse, OrderResponse, RevenueResponse, WebhookEventResponse
from .stripe_client import SIGNATURE_HEADER, PaymentGateway, StripeConfig, StripeGateway
from .webhooks import WebhookProcessor

logger = get_logger(__name__, component="api")

router = APIRouter(prefix="/api/v1", tags=["storefront"])
admin_router = APIRouter(prefix="/api/v1/admin", tags=["admin"])

MAX_WEBHOOK_BODY_BYTES = 65536


async def read_limited_body(request: Request, limit: int = MAX_WEBHOOK_BODY_BYTES) -> bytes:
    """
    Read the request body, giving up as soon as it grows past ``limit`` bytes

    A declared Content-Length over the limit is rejected before reading.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise ValidationError("Webhook body too large", field="body", max_bytes=limit)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise ValidationError("Webhook body too large", field="body", max_bytes=limit)
    return bytes(body)


# Dependency injection helpers
def get_payment_gateway(settings: Settings = Depends(get_settings)) -> PaymentGateway:
    return StripeGateway(StripeConfig.from_settings(settings))


def get_order_store(db: Session = Depends(get_db)) -> OrderStore:
    return OrderStore(db)


def get_catalog(db: Session = Depends(get_db)) -> CatalogReader:
    return CatalogReader(db)


def get_checkout_manager(
    catalog: CatalogReader = Depends(get_catalog),
    order_store: OrderStore = Depends(get_order_store),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
) -> CheckoutManager:
    return CheckoutManager(catalog, order_store, gateway, settings)


def get_webhook_processor(
    gateway: PaymentGateway = Depends(get_payment_gateway),
    order_store: OrderStore = Depends(get_order_store),
) -> WebhookProcessor:
    return WebhookProcessor(gateway, order_store)


def get_revenue_aggregator(
    order_store: OrderStore = Depends(get_order_store),
    catalog: CatalogReader = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
) -> RevenueAggregator:
    return RevenueAggregator(order_store, catalog, window_days=settings.revenue_window_days)


@router.post(
    "/stores/{store_id}/checkout",
    response_model=CheckoutCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an order and start a hosted checkout",
)
def create_checkout(
    store_id: str,
    request: CheckoutCreateRequest,
    manager: CheckoutManager = Depends(get_checkout_manager),
) -> CheckoutCreateResponse:
    """
    Create a pending order for the requested products and return the payment
    page URL the buyer should be redirected to.
    """
    result = manager.initiate_checkout(store_id, request.user_id, request.product_ids)
    return CheckoutCreateResponse(
        order_id=result.order_id,
        checkout_url=result.checkout_url,
        session_id=result.session_id,
        amount_total=result.amount_total,
        item_count=result.item_count,
    )


@router.get("/stores/{store_id}/orders", response_model=List[OrderResponse], summary="Recent orders of a store")
def list_store_orders(
    store_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    catalog: CatalogReader = Depends(get_catalog),
    order_store: OrderStore = Depends(get_order_store),
    settings: Settings = Depends(get_settings),
) -> List[OrderResponse]:
    catalog.get_store(store_id)
    orders = order_store.list_orders(store_id, limit=limit or settings.orders_page_size)
    return [OrderResponse.from_order(order) for order in orders]


@router.post("/webhooks", response_model=WebhookEventResponse, summary="Payment gateway webhook")
async def stripe_webhook(
    request: Request,
    processor: WebhookProcessor = Depends(get_webhook_processor),
) -> WebhookEventResponse:
    """
    Gateway-only endpoint. 2xx tells Stripe to stop redelivering; errors raised
    by the processor map to 4xx/5xx through the application exception handlers.
    """
    payload = await read_limited_body(request)
    signature = request.headers.get(SIGNATURE_HEADER)

    result = await run_in_threadpool(processor.process_webhook, payload, signature)
    logger.info(f"Webhook event {result.event_id} handled: {result.status.value}")
    return WebhookEventResponse(**result.to_dict())


@admin_router.get("/stores/{store_id}/orders", response_model=RevenueResponse, summary="Store revenue report")
def get_store_revenue(
    store_id: str,
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator),
) -> RevenueResponse:
    report = aggregator.summarize(store_id)
    return RevenueResponse(
        orders=[OrderResponse.from_order(order) for order in report.orders],
        total_revenue=report.total_revenue,
        sales_count=report.sales_count,
        since=report.since,
    )
