from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.models.order import OrderStatus


class OrderItemCreate(BaseModel):
    """One product line of a purchase."""
    product_id: int = Field(..., description="ID of the product to purchase")
    quantity: int = Field(default=1, ge=1, description="Quantity to purchase")


class OrderCreate(BaseModel):
    """Schema for creating a new order (purchase)."""
    items: list[OrderItemCreate] = Field(..., min_length=1, description="Products to purchase")
    shipping_address: str = Field(..., min_length=1, description="Delivery address")
    coupon_code: Optional[str] = Field(None, max_length=64, description="Optional coupon code")
    notes: Optional[str] = Field(None, max_length=1000)


class CheckoutRequest(BaseModel):
    """Schema for placing an order from the caller's cart."""
    shipping_address: str = Field(..., min_length=1, description="Delivery address")
    coupon_code: Optional[str] = Field(None, max_length=64)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Schema for order response."""
    id: int
    order_number: str
    user_id: int
    subtotal: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    status: OrderStatus
    coupon_id: Optional[int] = None
    shipping_address: str
    notes: Optional[str] = None
    items: list[OrderItemResponse]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderListResponse(BaseModel):
    """Schema for paginated order list response."""
    items: list[OrderResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class OrderStats(BaseModel):
    total_orders: int
    total_amount: Decimal
