from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List, Tuple
import logging

from sqlalchemy import func, update, or_
from sqlalchemy.orm import Session

from app.models.coupon import Coupon, DiscountType
from app.models.order import Order, OrderStatus
from app.schemas.coupon import CouponCreate, CouponUpdate
from app.services.exceptions import (
    ConflictError,
    CouponExpiredError,
    CouponNotFoundError,
    MinimumPurchaseNotMetError,
    NotFoundError,
    UsageLimitExceededError,
    ValidationError,
)
from app.services.pagination import paginate
from app.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def quantize(amount) -> Decimal:
    """Round a monetary amount to cents."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_discount(
    discount_type: DiscountType,
    value: Decimal,
    total_amount: Decimal,
    max_discount: Optional[Decimal] = None,
) -> Decimal:
    """
    Discount a coupon grants on ``total_amount``.

    Percentage coupons take ``value`` percent of the total, capped at
    ``max_discount`` when one is set. Fixed coupons take ``value``. The
    discount never exceeds the total.
    """
    total_amount = Decimal(total_amount)
    if discount_type == DiscountType.PERCENTAGE:
        discount = total_amount * Decimal(value) / Decimal(100)
        if max_discount is not None and discount > max_discount:
            discount = Decimal(max_discount)
    else:
        discount = Decimal(value)

    return quantize(min(discount, total_amount))


@dataclass
class CouponValidation:
    """Outcome of a successful coupon check."""
    coupon: Coupon
    discount_amount: Decimal
    final_amount: Decimal
    valid: bool = True


class CouponService:
    """
    Service class for Coupon operations.

    Validation never changes a coupon. The usage count is only incremented
    by ``redeem``, which the order flow calls inside its own transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, coupon_data: CouponCreate) -> Coupon:
        code = coupon_data.code.strip().upper()
        if self.db.query(Coupon.id).filter(Coupon.code == code).first():
            raise ConflictError("Coupon code already exists")

        start_date = as_utc(coupon_data.start_date)
        end_date = as_utc(coupon_data.end_date)
        if start_date >= end_date:
            raise ValidationError("Start date must be before end date")

        coupon = Coupon(
            code=code,
            discount_type=coupon_data.discount_type,
            value=coupon_data.value,
            min_purchase=coupon_data.min_purchase,
            max_discount=coupon_data.max_discount,
            start_date=start_date,
            end_date=end_date,
            usage_limit=coupon_data.usage_limit,
        )
        self.db.add(coupon)
        self.db.commit()
        self.db.refresh(coupon)

        logger.info(f"Coupon {code} created")
        return coupon

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        is_active: Optional[bool] = None,
    ) -> Tuple[List[Coupon], int, int]:
        query = self.db.query(Coupon)
        if is_active is not None:
            query = query.filter(Coupon.is_active.is_(is_active))
        return paginate(query, page, page_size, Coupon.id.desc())

    def get_by_id(self, coupon_id: int) -> Coupon:
        coupon = self.db.query(Coupon).filter(Coupon.id == coupon_id).first()
        if not coupon:
            raise NotFoundError(f"Coupon with ID {coupon_id} not found")
        return coupon

    def update(self, coupon_id: int, coupon_data: CouponUpdate) -> Coupon:
        coupon = self.get_by_id(coupon_id)

        update_data = coupon_data.model_dump(exclude_unset=True)
        update_data = {field: value for field, value in update_data.items() if value is not None}

        if "code" in update_data:
            code = update_data["code"].strip().upper()
            if code != coupon.code:
                clash = self.db.query(Coupon.id).filter(Coupon.code == code).first()
                if clash:
                    raise ConflictError("Coupon code already exists")
            update_data["code"] = code

        for field in ("start_date", "end_date"):
            if field in update_data:
                update_data[field] = as_utc(update_data[field])

        start_date = update_data.get("start_date", as_utc(coupon.start_date))
        end_date = update_data.get("end_date", as_utc(coupon.end_date))
        if start_date >= end_date:
            raise ValidationError("Start date must be before end date")

        discount_type = update_data.get("discount_type", coupon.discount_type)
        value = update_data.get("value", coupon.value)
        if discount_type == DiscountType.PERCENTAGE and value > 100:
            raise ValidationError("Percentage discount cannot exceed 100")

        for field, value in update_data.items():
            setattr(coupon, field, value)

        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def delete(self, coupon_id: int) -> None:
        """Soft delete a coupon."""
        coupon = self.get_by_id(coupon_id)
        coupon.is_active = False
        self.db.commit()
        logger.info(f"Coupon {coupon.code} deactivated")

    def validate(self, code: str, total_amount: Decimal, lock: bool = False) -> CouponValidation:
        """
        Check a coupon against a purchase total and compute its discount.

        Args:
            code: Coupon code (case-insensitive)
            total_amount: Purchase subtotal the coupon would apply to
            lock: Lock the coupon row (used by order placement)

        Raises:
            CouponNotFoundError: If the code does not resolve to an active coupon
            CouponExpiredError: If now is outside the coupon window
            UsageLimitExceededError: If the usage limit has been reached
            MinimumPurchaseNotMetError: If the total is below the minimum purchase
        """
        query = self.db.query(Coupon).filter(
            Coupon.code == code.strip().upper(),
            Coupon.is_active.is_(True),
        )
        if lock:
            query = query.with_for_update()
        coupon = query.first()

        if not coupon:
            raise CouponNotFoundError(f"Coupon {code} not found")

        now = utcnow()
        if not as_utc(coupon.start_date) <= now <= as_utc(coupon.end_date):
            raise CouponExpiredError(f"Coupon {coupon.code} is not valid at this time")

        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            raise UsageLimitExceededError(f"Coupon {coupon.code} has reached its usage limit")

        total_amount = Decimal(total_amount)
        if coupon.min_purchase is not None and total_amount < coupon.min_purchase:
            raise MinimumPurchaseNotMetError(
                f"Minimum purchase of {quantize(coupon.min_purchase)} required"
            )

        discount = calculate_discount(
            coupon.discount_type, coupon.value, total_amount, coupon.max_discount
        )
        return CouponValidation(
            coupon=coupon,
            discount_amount=discount,
            final_amount=quantize(total_amount - discount),
        )

    def redeem(self, coupon_id: int) -> bool:
        """
        Count one use of a coupon inside the current transaction.

        Returns False if the usage limit was reached in the meantime. The
        caller commits.
        """
        result = self.db.execute(
            update(Coupon)
            .where(
                Coupon.id == coupon_id,
                or_(Coupon.usage_limit.is_(None), Coupon.used_count < Coupon.usage_limit),
            )
            .values(used_count=Coupon.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def release(self, coupon_id: int) -> None:
        """Give back one use of a coupon (order cancelled). The caller commits."""
        self.db.execute(
            update(Coupon)
            .where(Coupon.id == coupon_id, Coupon.used_count > 0)
            .values(used_count=Coupon.used_count - 1)
            .execution_options(synchronize_session=False)
        )

    def get_stats(self) -> dict:
        now = utcnow()
        total_coupons = self.db.query(func.count(Coupon.id)).scalar()
        active_coupons = (
            self.db.query(func.count(Coupon.id))
            .filter(Coupon.is_active.is_(True), Coupon.end_date >= now)
            .scalar()
        )
        expired_coupons = (
            self.db.query(func.count(Coupon.id)).filter(Coupon.end_date < now).scalar()
        )
        total_usage = self.db.query(func.coalesce(func.sum(Coupon.used_count), 0)).scalar()
        total_discount = (
            self.db.query(func.coalesce(func.sum(Order.discount_amount), 0))
            .filter(Order.coupon_id.isnot(None), Order.status != OrderStatus.CANCELLED)
            .scalar()
        )

        return {
            "total_coupons": total_coupons,
            "active_coupons": active_coupons,
            "expired_coupons": expired_coupons,
            "total_usage": total_usage,
            "total_discount_given": quantize(total_discount),
        }
