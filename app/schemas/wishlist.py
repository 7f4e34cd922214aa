from pydantic import BaseModel, Field
from decimal import Decimal
from datetime import datetime
from typing import Optional


class WishlistItemAdd(BaseModel):
    product_id: int = Field(..., gt=0)


class WishlistItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: str
    slug: str
    price: Decimal
    available: bool = Field(..., description="Product is active and in stock")
    added_at: Optional[datetime] = None


class WishlistResponse(BaseModel):
    id: int
    items: list[WishlistItemResponse]
    total_items: int


class WishlistCheck(BaseModel):
    product_id: int
    in_wishlist: bool
