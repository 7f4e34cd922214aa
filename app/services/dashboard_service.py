from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import timedelta
from decimal import Decimal
import logging

from app.config import get_settings
from app.models.order import Order, OrderStatus
from app.models.product import Product
from app.models.user import User, UserRole
from app.services.coupon_service import quantize
from app.utils.dates import as_utc, month_key, month_start, shift_month, utcnow

logger = logging.getLogger(__name__)

settings = get_settings()


class DashboardService:
    """
    Admin dashboard aggregates.

    Revenue only counts delivered orders; the monthly sales series covers
    the last ``SALES_WINDOW_MONTHS`` calendar months including the current
    one, with empty months reported as zero.
    """

    def __init__(self, db: Session):
        self.db = db

    def overview(self) -> dict:
        revenue = (
            self.db.query(func.coalesce(func.sum(Order.total_amount), 0))
            .filter(Order.status == OrderStatus.DELIVERED)
            .scalar()
        )
        recent_orders = self.db.query(Order).order_by(Order.id.desc()).limit(10).all()
        low_stock_products = (
            self.db.query(Product)
            .filter(Product.is_active.is_(True))
            .order_by(Product.stock.asc(), Product.id.asc())
            .limit(10)
            .all()
        )

        return {
            "overview": {
                "users": self.db.query(func.count(User.id)).scalar(),
                "products": self.db.query(func.count(Product.id))
                .filter(Product.is_active.is_(True))
                .scalar(),
                "orders": self.db.query(func.count(Order.id)).scalar(),
                "revenue": quantize(revenue),
            },
            "user_stats": self.user_stats(),
            "recent_orders": recent_orders,
            "low_stock_products": low_stock_products,
            "sales_data": self.sales_data(),
        }

    def sales_data(self, months: int = None) -> dict:
        """
        Revenue of delivered orders grouped by ``YYYY-MM`` month.

        Returns:
            {"labels": [...], "data": [...]}, oldest month first
        """
        months = months or settings.SALES_WINDOW_MONTHS
        now = utcnow()

        buckets = {}
        for offset in range(months - 1, -1, -1):
            year, month = shift_month(now.year, now.month, -offset)
            buckets[f"{year:04d}-{month:02d}"] = Decimal("0")

        first_year, first_month = shift_month(now.year, now.month, -(months - 1))
        rows = (
            self.db.query(Order.created_at, Order.total_amount)
            .filter(
                Order.status == OrderStatus.DELIVERED,
                Order.created_at >= month_start(first_year, first_month),
            )
            .all()
        )
        for created_at, total_amount in rows:
            key = month_key(as_utc(created_at))
            if key in buckets:
                buckets[key] += Decimal(total_amount)

        return {
            "labels": list(buckets.keys()),
            "data": [quantize(amount) for amount in buckets.values()],
        }

    def user_stats(self) -> dict:
        now = utcnow()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        this_month = month_start(now.year, now.month)
        last_month = month_start(*shift_month(now.year, now.month, -1))

        def count(*criteria) -> int:
            return self.db.query(func.count(User.id)).filter(*criteria).scalar()

        total_users = count()
        active_users = count(User.is_active.is_(True))
        current_month_users = count(User.created_at >= this_month)
        last_month_users = count(User.created_at >= last_month, User.created_at < this_month)

        if last_month_users == 0:
            growth_rate = 100.0 if current_month_users > 0 else 0.0
        else:
            growth_rate = (current_month_users - last_month_users) / last_month_users * 100

        return {
            "total_users": total_users,
            "active_users": active_users,
            "inactive_users": total_users - active_users,
            "new_users_today": count(User.created_at >= today),
            "new_users_this_week": count(User.created_at >= now - timedelta(days=7)),
            "admin_users": count(User.role == UserRole.ADMIN),
            "customer_users": count(User.role == UserRole.CUSTOMER),
            "user_growth_rate": round(growth_rate, 2),
        }
