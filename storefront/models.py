"""
Storefront order models

An Order is created together with its items in one transaction and afterwards
only ever moves from pending to paid.
"""

import enum
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import TIMESTAMP, CheckConstraint, Column, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database.base import Base, DatabaseAgnosticEnum, generate_uuid


class OrderStatus(str, enum.Enum):
    """Order payment lifecycle; pending -> paid only"""

    PENDING = "pending"  # Order committed, waiting for the gateway confirmation
    PAID = "paid"  # Confirmed by a checkout.session.completed notification


class Order(Base):
    __tablename__ = "orders"

    # Random UUID4; also the metadata tag bound to the gateway session
    id = Column(String(36), primary_key=True, default=generate_uuid)
    store_id = Column(String(36), ForeignKey("stores.id"), nullable=False)
    user_id = Column(String(255), nullable=False, index=True)

    status = Column(DatabaseAgnosticEnum(OrderStatus), default=OrderStatus.PENDING, nullable=False)
    paid_at = Column(TIMESTAMP(timezone=True))
    payment_reference = Column(String(255), unique=True)  # gateway checkout session id

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

    __table_args__ = (Index("idx_orders_store_status_created", "store_id", "status", "created_at"),)

    def __repr__(self):
        return f"<Order(id={self.id}, store_id={self.store_id}, status={self.status})>"

    def is_paid(self) -> bool:
        return self.status == OrderStatus.PAID

    @property
    def total_amount(self) -> Decimal:
        return sum((item.total_price for item in self.items), Decimal("0.00"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "user_id": self.user_id,
            "status": self.status.value if self.status else None,
            "is_paid": self.is_paid(),
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "total_amount": str(self.total_amount),
            "order_items": [item.to_dict() for item in self.items],
        }


class OrderItem(Base):
    """One priced line of an order; price and quantity are frozen at checkout"""

    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    product_name = Column(String(255), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        Index("idx_order_items_order_id", "order_id"),
        Index("idx_order_items_product_id", "product_id"),
        CheckConstraint("unit_price >= 0", name="check_item_unit_price_positive"),
        CheckConstraint("quantity > 0", name="check_item_quantity_positive"),
    )

    @property
    def total_price(self) -> Decimal:
        return (Decimal(self.unit_price) * self.quantity).quantize(Decimal("0.01"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "unit_price": str(Decimal(self.unit_price).quantize(Decimal("0.01"))),
            "quantity": self.quantity,
        }
