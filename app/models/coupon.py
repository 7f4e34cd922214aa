from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, Enum, CheckConstraint
from sqlalchemy.sql import func
import enum

from app.database import Base


class DiscountType(str, enum.Enum):
    """Enum for coupon discount types."""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Coupon(Base):
    """
    Discount coupon redeemable at order placement.

    Attributes:
        code: Unique redemption code, stored upper-case
        discount_type: Percentage of the subtotal or a fixed amount
        value: Percentage (0-100) or fixed amount
        min_purchase: Optional minimum subtotal required
        max_discount: Optional cap on a percentage discount
        start_date: Start of the redemption window
        end_date: End of the redemption window
        usage_limit: Optional number of redemptions allowed
        used_count: Number of orders that redeemed this coupon
        is_active: False once the coupon has been soft-deleted
    """
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), nullable=False, unique=True, index=True)
    discount_type = Column(Enum(DiscountType), nullable=False)
    value = Column(Numeric(12, 2), nullable=False)
    min_purchase = Column(Numeric(12, 2), nullable=True)
    max_discount = Column(Numeric(12, 2), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('used_count >= 0', name='check_used_count_non_negative'),
    )

    def __repr__(self):
        return f"<Coupon(id={self.id}, code='{self.code}', used={self.used_count})>"
