"""
Tests for store revenue reporting
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.exceptions import NotFoundError
from storefront.catalog import CatalogReader
from storefront.models import Order, OrderStatus
from storefront.order_store import OrderStore
from storefront.revenue import RevenueAggregator, sum_revenue
from tests.fixtures.database import create_order, create_product, create_store

pytestmark = pytest.mark.unit


@pytest.fixture
def aggregator(db_session):
    return RevenueAggregator(OrderStore(db_session), CatalogReader(db_session), window_days=365)


def test_only_paid_orders_count(db_session, store, aggregator):
    ten = create_product(db_session, store, price=Decimal("10.00"))
    twenty = create_product(db_session, store, price=Decimal("20.00"))
    hundred = create_product(db_session, store, price=Decimal("100.00"))
    create_order(db_session, store, [(ten, 1), (twenty, 1)], OrderStatus.PAID)
    create_order(db_session, store, [(hundred, 1)], OrderStatus.PENDING)

    report = aggregator.summarize(store.id)

    assert report.total_revenue == Decimal("30.00")
    assert report.sales_count == 1


def test_quantities_multiply_frozen_prices(db_session, store, aggregator):
    product = create_product(db_session, store, price=Decimal("2.50"))
    create_order(db_session, store, [(product, 4)], OrderStatus.PAID)

    assert aggregator.summarize(store.id).total_revenue == Decimal("10.00")


def test_orders_outside_window_are_excluded(db_session, store, aggregator):
    product = create_product(db_session, store, price=Decimal("10.00"))
    now = datetime.now(timezone.utc)
    create_order(db_session, store, [(product, 1)], OrderStatus.PAID, created_at=now - timedelta(days=30))
    create_order(db_session, store, [(product, 1)], OrderStatus.PAID, created_at=now - timedelta(days=366))

    report = aggregator.summarize(store.id, now=now)

    assert report.total_revenue == Decimal("10.00")
    assert report.sales_count == 1
    assert report.since == now - timedelta(days=365)


def test_other_stores_are_excluded(db_session, store, aggregator):
    other = create_store(db_session, name="Other")
    product = create_product(db_session, other, price=Decimal("50.00"))
    create_order(db_session, other, [(product, 1)], OrderStatus.PAID)

    report = aggregator.summarize(store.id)

    assert report.total_revenue == Decimal("0.00")
    assert report.orders == []


def test_unknown_store(aggregator):
    with pytest.raises(NotFoundError):
        aggregator.summarize("missing-store")


def test_sum_revenue_of_nothing_is_zero():
    assert sum_revenue([]) == Decimal("0.00")


def test_window_is_computed_in_utc(aggregator):
    since = aggregator.window_start()

    assert since.utcoffset() == timedelta(0)
    assert datetime.now(timezone.utc) - since >= timedelta(days=365)


def test_window_honours_caller_offset(aggregator):
    now = datetime(2026, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=5)))

    assert aggregator.window_start(now) == datetime(2025, 6, 1, 7, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("column", ["created_at", "updated_at", "paid_at"])
def test_order_timestamps_are_timezone_aware(column):
    assert Order.__table__.c[column].type.timezone is True
