"""
Storefront API schemas

Pydantic request/response models for checkout, order listing, revenue and
webhook endpoints.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class CheckoutCreateRequest(BaseModel):
    """Checkout request; repeat a product id to buy it more than once"""

    user_id: str = Field(..., min_length=1, max_length=255, description="Buyer user ID")
    product_ids: List[str] = Field(..., min_length=1, max_length=100, description="Products to purchase")

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v):
        if not v.strip():
            raise ValueError("User Id is required")
        return v.strip()

    @field_validator("product_ids")
    @classmethod
    def validate_product_ids(cls, v):
        if any(not product_id.strip() for product_id in v):
            raise ValueError("Product Ids must not be blank")
        return [product_id.strip() for product_id in v]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": "user_2abc",
                "product_ids": ["0b6f0c2e-8a59-4c8b-a1d7-3f4b0e1c9d10", "0b6f0c2e-8a59-4c8b-a1d7-3f4b0e1c9d10"],
            }
        }
    )


class CheckoutCreateResponse(BaseModel):
    order_id: str = Field(..., description="Pending order created for this checkout")
    checkout_url: str = Field(..., description="Hosted payment page to redirect the buyer to")
    session_id: str = Field(..., description="Gateway checkout session ID")
    amount_total: Decimal = Field(..., description="Order total in USD")
    item_count: int = Field(..., description="Number of units purchased")

    @field_serializer("amount_total")
    def serialize_amount(self, v: Decimal) -> str:
        return str(v)


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    product_name: str
    unit_price: Decimal
    quantity: int

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("unit_price")
    def serialize_price(self, v: Decimal) -> str:
        return str(Decimal(v).quantize(Decimal("0.01")))


class OrderResponse(BaseModel):
    id: str
    store_id: str
    user_id: str
    status: str
    is_paid: bool
    paid_at: Optional[datetime] = None
    created_at: datetime
    total_amount: Decimal
    order_items: List[OrderItemResponse]

    @field_serializer("total_amount")
    def serialize_total(self, v: Decimal) -> str:
        return str(v)

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            id=order.id,
            store_id=order.store_id,
            user_id=order.user_id,
            status=order.status.value,
            is_paid=order.is_paid(),
            paid_at=order.paid_at,
            created_at=order.created_at,
            total_amount=order.total_amount,
            order_items=[OrderItemResponse.model_validate(item) for item in order.items],
        )


class RevenueResponse(BaseModel):
    orders: List[OrderResponse]
    total_revenue: Decimal
    sales_count: int
    since: datetime

    @field_serializer("total_revenue")
    def serialize_revenue(self, v: Decimal) -> str:
        return str(v)


class WebhookEventResponse(BaseModel):
    status: str = Field(..., description="processed, duplicate or ignored")
    event_id: Optional[str] = None
    event_type: Optional[str] = None
    order_id: Optional[str] = None
    reason: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
