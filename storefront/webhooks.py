"""
Payment notification processing

Stripe calls the webhook endpoint out of band, possibly more than once and in
any order. Processing is:

1. authenticate the raw body against the signature header (before parsing),
2. parse the envelope into a known event kind or an unhandled one,
3. for a checkout session whose payment is settled, move the referenced order
   from pending to paid with a single conditional update. A session that
   completes unpaid (delayed payment methods) is acknowledged and left pending
   until ``checkout.session.async_payment_succeeded`` arrives.

Any 2xx answer stops Stripe from retrying, so only outcomes that are final are
acknowledged; datastore failures propagate as server errors and get redelivered.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import NotFoundError, ValidationError
from core.logging import get_logger
from core.metrics import metrics

from .order_store import OrderStore
from .stripe_client import ORDER_ID_METADATA_KEY, PaymentGateway

logger = get_logger(__name__, component="webhooks")


class WebhookEventType(Enum):
    """Stripe event types this service acts on"""

    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
    # Delayed payment methods confirm in a second event after the session completed unpaid
    CHECKOUT_SESSION_ASYNC_PAYMENT_SUCCEEDED = "checkout.session.async_payment_succeeded"


# payment_status values of a session whose money is actually collected
SETTLED_PAYMENT_STATUSES = frozenset({"paid", "no_payment_required"})


class WebhookStatus(Enum):
    """Outcome reported back to the gateway"""

    PROCESSED = "processed"  # this delivery marked the order paid
    DUPLICATE = "duplicate"  # order already paid by an earlier delivery
    IGNORED = "ignored"  # event kind or payload this service does not act on


class StripeEventEnvelope(BaseModel):
    """Outer shape shared by every Stripe event"""

    id: str
    type: str
    created: Optional[int] = None
    livemode: bool = False
    data: Dict[str, Any] = Field(default_factory=dict)


class CheckoutSessionObject(BaseModel):
    """The ``data.object`` of a checkout session event, reduced to what is used"""

    id: Optional[str] = None
    payment_status: Optional[str] = None
    metadata: Optional[Dict[str, str]] = None


@dataclass(frozen=True)
class CheckoutSessionCompleted:
    event_id: str
    session_id: Optional[str]
    order_id: Optional[str]
    payment_status: Optional[str]
    event_type: str = WebhookEventType.CHECKOUT_SESSION_COMPLETED.value

    @property
    def is_settled(self) -> bool:
        return self.payment_status in SETTLED_PAYMENT_STATUSES


@dataclass(frozen=True)
class UnhandledEvent:
    event_id: str
    event_type: str


PaymentNotification = Union[CheckoutSessionCompleted, UnhandledEvent]


@dataclass(frozen=True)
class WebhookResult:
    status: WebhookStatus
    event_id: str
    event_type: str
    order_id: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "event_id": self.event_id,
            "event_type": self.event_type,
            "order_id": self.order_id,
            "reason": self.reason,
        }


SESSION_EVENT_TYPES = frozenset(
    {
        WebhookEventType.CHECKOUT_SESSION_COMPLETED.value,
        WebhookEventType.CHECKOUT_SESSION_ASYNC_PAYMENT_SUCCEEDED.value,
    }
)


def parse_notification(payload: bytes) -> PaymentNotification:
    """Turn an authenticated body into a known event kind"""
    try:
        envelope = StripeEventEnvelope.model_validate(json.loads(payload))
    except (ValueError, PydanticValidationError) as e:
        # json.JSONDecodeError is a ValueError
        raise ValidationError("Malformed webhook payload", field="body") from e

    if envelope.type not in SESSION_EVENT_TYPES:
        return UnhandledEvent(event_id=envelope.id, event_type=envelope.type)

    try:
        session = CheckoutSessionObject.model_validate(envelope.data.get("object"))
    except PydanticValidationError as e:
        raise ValidationError(
            "Malformed checkout session in webhook payload", field="data.object", event_id=envelope.id
        ) from e

    metadata = session.metadata or {}
    return CheckoutSessionCompleted(
        event_id=envelope.id,
        session_id=session.id,
        order_id=metadata.get(ORDER_ID_METADATA_KEY) or None,
        payment_status=session.payment_status,
        event_type=envelope.type,
    )


class WebhookProcessor:
    def __init__(self, gateway: PaymentGateway, order_store: OrderStore):
        self.gateway = gateway
        self.order_store = order_store

    def process_webhook(self, payload: bytes, signature: Optional[str]) -> WebhookResult:
        # Authentication comes first; nothing about the body is trusted before it
        try:
            self.gateway.verify_signature(payload, signature)
        except Exception:
            metrics.track_notification("rejected")
            raise

        notification = parse_notification(payload)

        if isinstance(notification, UnhandledEvent):
            logger.info(f"Ignoring {notification.event_type} event {notification.event_id}")
            metrics.track_notification(WebhookStatus.IGNORED.value)
            return WebhookResult(
                status=WebhookStatus.IGNORED,
                event_id=notification.event_id,
                event_type=notification.event_type,
                reason=f"Unhandled event type: {notification.event_type}",
            )

        result = self.handle_session_completed(notification)
        metrics.track_notification(result.status.value)
        return result

    def handle_session_completed(self, event: CheckoutSessionCompleted) -> WebhookResult:
        event_type = event.event_type

        if not event.order_id:
            logger.warning(f"No order_id in metadata of session {event.session_id} (event {event.event_id})")
            return WebhookResult(
                status=WebhookStatus.IGNORED,
                event_id=event.event_id,
                event_type=event_type,
                reason="No order_id in metadata",
            )

        log = logger.with_context(order_id=event.order_id, event_id=event.event_id)

        if not event.is_settled:
            log.warning(f"Session {event.session_id} completed but payment status is {event.payment_status}")
            return WebhookResult(
                status=WebhookStatus.IGNORED,
                event_id=event.event_id,
                event_type=event_type,
                order_id=event.order_id,
                reason=f"Payment not settled: {event.payment_status}",
            )

        if self.order_store.mark_paid_if_pending(event.order_id, payment_reference=event.session_id):
            metrics.track_order_paid()
            log.info(f"Order {event.order_id} marked paid by session {event.session_id}")
            return WebhookResult(
                status=WebhookStatus.PROCESSED,
                event_id=event.event_id,
                event_type=event_type,
                order_id=event.order_id,
            )

        # No row moved: either the order was already paid or it does not exist
        order = self.order_store.get_order(event.order_id)
        if order is None:
            metrics.track_notification("order_not_found")
            log.error(f"Payment confirmed for unknown order {event.order_id} (session {event.session_id})")
            raise NotFoundError("Order", event.order_id)

        log.info(f"Order {event.order_id} already paid, acknowledging redelivery")
        return WebhookResult(
            status=WebhookStatus.DUPLICATE,
            event_id=event.event_id,
            event_type=event_type,
            order_id=event.order_id,
            reason="Order already paid",
        )
