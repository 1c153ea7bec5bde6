"""
Checkout orchestration

Validates a checkout request against the catalog, commits a pending order with
its items, then asks the payment gateway for a hosted session bound to that
order. The local order is the source of truth: once it is committed, a failing
gateway call leaves it pending and the caller starts over with a new checkout.
"""

from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Sequence

from core.config import Settings
from core.exceptions import ValidationError
from core.logging import get_logger
from core.metrics import metrics

from .catalog import CatalogReader
from .order_store import LineItem, OrderStore
from .stripe_client import PaymentGateway, line_items_total

logger = get_logger(__name__, component="checkout")


@dataclass(frozen=True)
class CheckoutResult:
    order_id: str
    checkout_url: str
    session_id: str
    amount_total: Decimal
    item_count: int


def group_product_ids(product_ids: Sequence[str]) -> "OrderedDict[str, int]":
    """
    Collapse repeated product ids into quantities

    Quantity is expressed by repetition: ``["a", "b", "a"]`` buys two of ``a``
    and one of ``b``. First-appearance order is kept.
    """
    quantities: "OrderedDict[str, int]" = OrderedDict()
    for product_id in product_ids:
        quantities[product_id] = quantities.get(product_id, 0) + 1
    return quantities


class CheckoutManager:
    def __init__(
        self,
        catalog: CatalogReader,
        order_store: OrderStore,
        gateway: PaymentGateway,
        settings: Settings,
    ):
        self.catalog = catalog
        self.order_store = order_store
        self.gateway = gateway
        self.settings = settings

    def build_line_items(self, store_id: str, product_ids: Sequence[str]) -> List[LineItem]:
        """Price every requested product; any unpurchasable product fails the whole request"""
        if not product_ids:
            raise ValidationError("At least one product is required", field="product_ids")
        if len(product_ids) > self.settings.max_products_per_checkout:
            raise ValidationError(
                f"At most {self.settings.max_products_per_checkout} products per checkout",
                field="product_ids",
            )

        line_items = []
        for product_id, quantity in group_product_ids(product_ids).items():
            product = self.catalog.get_purchasable_product(product_id, store_id)
            line_items.append(
                LineItem(product_id=product.id, name=product.name, unit_price=product.price, quantity=quantity)
            )
        return line_items

    def initiate_checkout(self, store_id: str, user_id: str, product_ids: Sequence[str]) -> CheckoutResult:
        log = logger.with_context(store_id=store_id, user_id=user_id)

        try:
            self.catalog.get_store(store_id)
            line_items = self.build_line_items(store_id, product_ids)
            order = self.order_store.create_order_with_items(store_id, user_id, line_items)
        except Exception:
            metrics.track_checkout("rejected")
            raise

        success_url, cancel_url = self.settings.checkout_urls(store_id)
        try:
            session = self.gateway.create_hosted_session(line_items, order.id, success_url, cancel_url)
        except Exception:
            metrics.track_checkout("gateway_failed")
            # The order stays pending with no reachable session; reconciliation is external
            log.warning(f"Order {order.id} orphaned: payment session could not be created")
            raise

        metrics.track_checkout("created")
        amount_total = line_items_total(line_items)
        log.info(f"Checkout started for order {order.id}: {len(line_items)} line items, total {amount_total}")

        return CheckoutResult(
            order_id=order.id,
            checkout_url=session.url,
            session_id=session.session_id,
            amount_total=amount_total,
            item_count=sum(item.quantity for item in line_items),
        )
