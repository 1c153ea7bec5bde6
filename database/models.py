"""
Catalog models shared by the storefront
Stores and products are maintained by plain CRUD endpoints; checkout only reads them.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import TIMESTAMP, Boolean, CheckConstraint, Column, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database.base import Base, generate_uuid


class Store(Base):
    __tablename__ = "stores"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(255), nullable=False, index=True)  # store owner
    name = Column(String(255), nullable=False)
    description = Column(Text)
    image_url = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    products = relationship("Product", back_populates="store")

    def __repr__(self):
        return f"<Store(id={self.id}, name={self.name})>"


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    store_id = Column(String(36), ForeignKey("stores.id"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    price = Column(Numeric(10, 2))  # nullable: draft products may not be priced yet
    published = Column(Boolean, default=False, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    store = relationship("Store", back_populates="products")

    __table_args__ = (
        Index("idx_products_store_published", "store_id", "published"),
        CheckConstraint("price IS NULL OR price >= 0", name="check_product_price_positive"),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name}, price={self.price})>"

    @property
    def is_purchasable(self) -> bool:
        """Published and priced"""
        return bool(self.published) and self.price is not None

    @property
    def unit_price(self) -> Optional[Decimal]:
        if self.price is None:
            return None
        return Decimal(self.price).quantize(Decimal("0.01"))
