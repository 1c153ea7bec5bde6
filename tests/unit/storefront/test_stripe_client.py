"""
Tests for the Stripe payment gateway
"""
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
import stripe

from core.exceptions import AuthenticationError, ConfigurationError, PaymentGatewayError
from storefront.order_store import LineItem
from storefront.stripe_client import (
    StripeConfig,
    StripeGateway,
    create_one_time_line_item,
    format_amount_for_stripe,
    line_items_total,
)
from tests.fixtures.payments import WEBHOOK_SECRET, sign_payload

pytestmark = pytest.mark.unit


@pytest.fixture
def stripe_config():
    return StripeConfig(secret_key="sk_test_123", webhook_secret=WEBHOOK_SECRET)


@pytest.fixture
def mock_client():
    client = Mock()
    client.checkout.sessions.create.return_value = SimpleNamespace(
        id="cs_test_abc", url="https://checkout.stripe.com/c/pay/cs_test_abc", amount_total=2500
    )
    return client


class TestAmounts:
    @pytest.mark.parametrize(
        "amount,cents",
        [(Decimal("10.00"), 1000), (Decimal("0.99"), 99), (Decimal("19.995"), 2000), (Decimal("0"), 0)],
    )
    def test_format_amount_for_stripe(self, amount, cents):
        assert format_amount_for_stripe(amount) == cents

    def test_one_time_line_item(self):
        item = LineItem(product_id="p1", name="Mug", unit_price=Decimal("15.00"), quantity=2)

        assert create_one_time_line_item(item, "eur") == {
            "price_data": {
                "currency": "eur",
                "product_data": {"name": "Mug", "metadata": {"product_id": "p1"}},
                "unit_amount": 1500,
            },
            "quantity": 2,
        }

    def test_line_items_total(self):
        items = [
            LineItem(product_id="p1", name="Mug", unit_price=Decimal("15.00"), quantity=2),
            LineItem(product_id="p2", name="Cap", unit_price=Decimal("5.00")),
        ]

        assert line_items_total(items) == Decimal("35.00")


class TestCreateHostedSession:
    def test_session_params(self, stripe_config, mock_client):
        gateway = StripeGateway(stripe_config, client=mock_client)
        items = [LineItem(product_id="p1", name="Mug", unit_price=Decimal("25.00"))]

        session = gateway.create_hosted_session(items, "order-1", "https://s/ok", "https://s/cancel")

        assert session.session_id == "cs_test_abc"
        assert session.url == "https://checkout.stripe.com/c/pay/cs_test_abc"
        assert session.amount_total == 2500

        params = mock_client.checkout.sessions.create.call_args.kwargs["params"]
        assert params["mode"] == "payment"
        assert params["metadata"] == {"order_id": "order-1"}
        assert params["payment_intent_data"] == {"metadata": {"order_id": "order-1"}}
        assert params["client_reference_id"] == "order-1"
        assert params["success_url"] == "https://s/ok"
        assert params["cancel_url"] == "https://s/cancel"
        assert params["line_items"][0]["price_data"]["unit_amount"] == 2500

    def test_stripe_error_becomes_payment_gateway_error(self, stripe_config, mock_client):
        mock_client.checkout.sessions.create.side_effect = stripe.InvalidRequestError(
            "No such price", param="line_items", code="resource_missing", http_status=400
        )
        gateway = StripeGateway(stripe_config, client=mock_client)

        with pytest.raises(PaymentGatewayError) as exc_info:
            gateway.create_hosted_session(
                [LineItem(product_id="p1", name="Mug", unit_price=Decimal("1.00"))], "order-1", "ok", "cancel"
            )

        error = exc_info.value
        assert error.status_code == 502
        assert error.details["order_id"] == "order-1"
        assert error.details["gateway_error_code"] == "resource_missing"

    def test_missing_secret_key(self):
        gateway = StripeGateway(StripeConfig(secret_key=None, webhook_secret=WEBHOOK_SECRET))

        with pytest.raises(ConfigurationError):
            gateway.create_hosted_session([], "order-1", "ok", "cancel")

    def test_client_is_built_per_instance(self, stripe_config):
        gateway = StripeGateway(stripe_config)

        assert isinstance(gateway.client, stripe.StripeClient)
        assert gateway.client is gateway.client


class TestVerifySignature:
    def test_valid_signature(self, stripe_config):
        payload = b'{"id": "evt_1"}'

        StripeGateway(stripe_config).verify_signature(payload, sign_payload(payload))

    def test_wrong_secret(self, stripe_config):
        payload = b'{"id": "evt_1"}'

        with pytest.raises(AuthenticationError):
            StripeGateway(stripe_config).verify_signature(payload, sign_payload(payload, secret="whsec_other"))

    def test_garbage_header(self, stripe_config):
        with pytest.raises(AuthenticationError):
            StripeGateway(stripe_config).verify_signature(b"{}", "not-a-signature")

    def test_non_utf8_body(self, stripe_config):
        payload = b"\xff\xfe"

        with pytest.raises(AuthenticationError):
            StripeGateway(stripe_config).verify_signature(payload, sign_payload(payload))

    def test_missing_webhook_secret(self):
        gateway = StripeGateway(StripeConfig(secret_key="sk_test_123", webhook_secret=None))

        with pytest.raises(ConfigurationError):
            gateway.verify_signature(b"{}", "t=1,v1=abc")
