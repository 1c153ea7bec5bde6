"""
Revenue reporting for store owners
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

from .catalog import CatalogReader
from .models import Order
from .order_store import OrderStore


@dataclass
class RevenueReport:
    store_id: str
    since: datetime
    orders: List[Order]
    total_revenue: Decimal

    @property
    def sales_count(self) -> int:
        return len(self.orders)


def sum_revenue(orders: List[Order]) -> Decimal:
    """Sum of frozen item prices times quantities over all orders"""
    return sum((order.total_amount for order in orders), Decimal("0.00"))


class RevenueAggregator:
    def __init__(self, order_store: OrderStore, catalog: CatalogReader, window_days: int = 365):
        self.order_store = order_store
        self.catalog = catalog
        self.window_days = window_days

    def window_start(self, now: Optional[datetime] = None) -> datetime:
        return (now or datetime.now(timezone.utc)) - timedelta(days=self.window_days)

    def summarize(self, store_id: str, now: Optional[datetime] = None) -> RevenueReport:
        """Paid orders of the trailing window and the revenue they realized"""
        self.catalog.get_store(store_id)

        since = self.window_start(now)
        orders = self.order_store.find_paid_orders(store_id, since)
        return RevenueReport(store_id=store_id, since=since, orders=orders, total_revenue=sum_revenue(orders))
