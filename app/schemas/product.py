from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from decimal import Decimal
from typing import Optional
import enum


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    description: Optional[str] = Field(None, description="Long description")
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, description="Unit price")
    stock: int = Field(..., ge=0, description="Available stock (must be non-negative)")
    category_id: int = Field(..., description="Owning category")
    images: list[str] = Field(default_factory=list, description="Image URLs")


class ProductCreate(ProductBase):
    """Schema for creating a new product. The slug is derived from the name."""
    pass


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Product name")
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2, description="Unit price")
    stock: Optional[int] = Field(None, ge=0, description="Available stock")
    category_id: Optional[int] = None
    images: Optional[list[str]] = None
    is_active: Optional[bool] = None


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    slug: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Schema for paginated product list response."""
    items: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class StockDirection(str, enum.Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class StockAdjustment(BaseModel):
    """Signed stock change applied by the stock ledger."""
    quantity: int = Field(..., gt=0, description="Number of units to add or remove")
    direction: StockDirection = Field(..., description="increase or decrease")


class ProductSortField(str, enum.Enum):
    CREATED_AT = "created_at"
    NAME = "name"
    PRICE = "price"
    STOCK = "stock"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"
