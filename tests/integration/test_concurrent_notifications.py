"""
Concurrent delivery of the same payment confirmation

Runs against a file-backed SQLite database so every worker has its own
connection. Transactions start with BEGIN IMMEDIATE, which makes SQLite
serialize writers through its busy timeout instead of failing lock upgrades.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from database.session import init_db
from storefront.models import OrderStatus
from storefront.order_store import OrderStore
from storefront.webhooks import WebhookProcessor, WebhookStatus
from tests.fixtures.database import create_order, create_product, create_store
from tests.fixtures.payments import FakeGateway, make_event, sign_payload

pytestmark = pytest.mark.integration

WORKERS = 8


@pytest.fixture
def file_session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    init_db(bind=engine)
    try:
        yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    finally:
        engine.dispose()


def test_only_one_delivery_marks_order_paid(file_session_factory):
    setup = file_session_factory()
    try:
        store = create_store(setup)
        order = create_order(setup, store, [(create_product(setup, store), 1)])
    finally:
        setup.close()

    payload = make_event(order_id=order.id, session_id="cs_test_race")
    signature = sign_payload(payload)
    barrier = threading.Barrier(WORKERS)

    def deliver():
        session = file_session_factory()
        try:
            processor = WebhookProcessor(FakeGateway(), OrderStore(session))
            barrier.wait()
            return processor.process_webhook(payload, signature).status
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        futures = [pool.submit(deliver) for _ in range(WORKERS)]
        statuses = [future.result(timeout=60) for future in futures]

    assert statuses.count(WebhookStatus.PROCESSED) == 1
    assert statuses.count(WebhookStatus.DUPLICATE) == WORKERS - 1

    check = file_session_factory()
    try:
        assert OrderStore(check).get_order(order.id).status == OrderStatus.PAID
    finally:
        check.close()
