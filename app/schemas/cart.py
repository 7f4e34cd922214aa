from pydantic import BaseModel, Field
from decimal import Decimal


class CartItemAdd(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(default=1, gt=0)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., gt=0)


class CartItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int
    subtotal: Decimal


class CartResponse(BaseModel):
    """Cart contents priced at current product prices."""
    id: int
    items: list[CartItemResponse]
    total_items: int
    total_price: Decimal
