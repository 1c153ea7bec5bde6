"""
Order store: durable order records and their only two write paths

Orders are written exactly twice in their life: once when checkout creates the
order together with all of its items, and once when a payment confirmation
flips it from pending to paid. Both writes are single transactions.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from core.exceptions import DatabaseError, ValidationError
from core.logging import get_logger

from .models import Order, OrderItem, OrderStatus

logger = get_logger(__name__, component="order_store")


@dataclass(frozen=True)
class LineItem:
    """Checkout line: a product at the price read from the catalog"""

    product_id: str
    name: str
    unit_price: Decimal
    quantity: int = 1

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity


class OrderStore:
    def __init__(self, db: Session):
        self.db = db

    def create_order_with_items(self, store_id: str, user_id: str, items: Sequence[LineItem]) -> Order:
        """
        Persist a pending order and all of its items in one transaction

        Either the order and every item are committed, or nothing is.
        """
        if not items:
            raise ValidationError("An order needs at least one item", field="product_ids")

        order = Order(store_id=store_id, user_id=user_id, status=OrderStatus.PENDING)
        for position, item in enumerate(items):
            if item.quantity < 1:
                raise ValidationError("Quantity must be at least 1", field="product_ids", product_id=item.product_id)
            order.items.append(
                OrderItem(
                    product_id=item.product_id,
                    product_name=item.name,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                    position=position,
                )
            )

        try:
            self.db.add(order)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create order for store {store_id}: {e}")
            raise DatabaseError("Failed to create order", operation="create_order_with_items") from e

        logger.info(f"Created pending order {order.id} for store {store_id} with {len(items)} line items")
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Latest committed state of an order, or None"""
        try:
            return self.db.get(
                Order,
                order_id,
                options=[selectinload(Order.items)],
                populate_existing=True,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("Failed to load order", operation="get_order", order_id=order_id) from e

    def mark_paid_if_pending(self, order_id: str, payment_reference: Optional[str] = None) -> bool:
        """
        Conditionally move an order from pending to paid

        Returns True only for the call that performed the transition. Concurrent
        or repeated calls for the same order observe zero affected rows.
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status == OrderStatus.PENDING)
            .values(
                status=OrderStatus.PAID,
                paid_at=datetime.now(timezone.utc),
                payment_reference=payment_reference,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to mark order {order_id} paid: {e}")
            raise DatabaseError("Failed to update order status", operation="mark_paid_if_pending", order_id=order_id) from e

        return result.rowcount == 1

    def find_paid_orders(self, store_id: str, since: datetime) -> List[Order]:
        """Paid orders of a store created at or after ``since``, items loaded"""
        stmt = (
            select(Order)
            .options(selectinload(Order.items))
            .where(
                Order.store_id == store_id,
                Order.status == OrderStatus.PAID,
                Order.created_at >= since,
            )
            .order_by(Order.created_at.desc())
        )
        return self._all(stmt, "find_paid_orders")

    def list_orders(self, store_id: str, limit: int = 10) -> List[Order]:
        """Most recent orders of a store regardless of status"""
        stmt = (
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.store_id == store_id)
            .order_by(Order.created_at.desc())
            .limit(limit)
        )
        return self._all(stmt, "list_orders")

    def _all(self, stmt, operation: str) -> List[Order]:
        try:
            return list(self.db.scalars(stmt.execution_options(populate_existing=True)).all())
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("Failed to query orders", operation=operation) from e
