"""
Payment gateway fixtures.

FakeGateway records hosted-session requests instead of calling Stripe, but
verifies webhook signatures with the real Stripe scheme so tests exercise the
same authentication path as production.
"""
import hashlib
import hmac
import json
import time
from typing import Any, Dict, List, Optional

import pytest

from core.exceptions import PaymentGatewayError
from storefront.stripe_client import HostedSession, PaymentGateway, StripeConfig, StripeGateway

WEBHOOK_SECRET = "whsec_test_storefront_secret"


class FakeGateway(PaymentGateway):
    def __init__(self, webhook_secret: str = WEBHOOK_SECRET, fail_with: Optional[Exception] = None):
        self.fail_with = fail_with
        self.sessions: List[Dict[str, Any]] = []
        self._verifier = StripeGateway(StripeConfig(secret_key=None, webhook_secret=webhook_secret))

    def create_hosted_session(self, line_items, order_id, success_url, cancel_url) -> HostedSession:
        if self.fail_with is not None:
            raise self.fail_with

        session_id = f"cs_test_{len(self.sessions) + 1}"
        self.sessions.append(
            {
                "session_id": session_id,
                "line_items": list(line_items),
                "order_id": order_id,
                "success_url": success_url,
                "cancel_url": cancel_url,
            }
        )
        return HostedSession(session_id=session_id, url=f"https://checkout.stripe.com/c/pay/{session_id}")

    def verify_signature(self, payload: bytes, signature: Optional[str]) -> None:
        self._verifier.verify_signature(payload, signature)


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Stripe-Signature header value for ``payload``"""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def make_event(
    event_type: str = "checkout.session.completed",
    order_id: Optional[str] = None,
    session_id: str = "cs_test_1",
    event_id: str = "evt_test_1",
    payment_status: str = "paid",
) -> bytes:
    """Serialized Stripe event envelope"""
    metadata = {"order_id": order_id} if order_id is not None else {}
    event = {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "created": int(time.time()),
        "livemode": False,
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "payment_status": payment_status,
                "metadata": metadata,
            }
        },
    }
    return json.dumps(event).encode("utf-8")


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def failing_gateway() -> FakeGateway:
    return FakeGateway(fail_with=PaymentGatewayError("Stripe is unavailable"))
