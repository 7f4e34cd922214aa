from pydantic import BaseModel, Field, ConfigDict, model_validator
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.models.coupon import DiscountType


class CouponCreate(BaseModel):
    """Schema for creating a coupon. Codes are stored upper-case."""
    code: str = Field(..., min_length=1, max_length=64, description="Redemption code")
    discount_type: DiscountType
    value: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    min_purchase: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    max_discount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    start_date: datetime
    end_date: datetime
    usage_limit: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_percentage(self):
        if self.discount_type == DiscountType.PERCENTAGE and self.value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class CouponUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=64)
    discount_type: Optional[DiscountType] = None
    value: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    min_purchase: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    max_discount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    usage_limit: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class CouponResponse(BaseModel):
    id: int
    code: str
    discount_type: DiscountType
    value: Decimal
    min_purchase: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    start_date: datetime
    end_date: datetime
    usage_limit: Optional[int] = None
    used_count: int
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CouponListResponse(BaseModel):
    items: list[CouponResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class CouponValidateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    total_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class CouponValidationResponse(BaseModel):
    valid: bool
    coupon: CouponResponse
    discount_amount: Decimal
    final_amount: Decimal
    message: str = "Coupon applied successfully"


class CouponStats(BaseModel):
    total_coupons: int
    active_coupons: int
    expired_coupons: int
    total_usage: int
    total_discount_given: Decimal
