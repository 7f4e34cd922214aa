from pydantic import BaseModel
from decimal import Decimal

from app.schemas.order import OrderResponse
from app.schemas.product import ProductResponse


class Overview(BaseModel):
    users: int
    products: int
    orders: int
    revenue: Decimal


class UserStats(BaseModel):
    total_users: int
    active_users: int
    inactive_users: int
    new_users_today: int
    new_users_this_week: int
    admin_users: int
    customer_users: int
    user_growth_rate: float


class SalesData(BaseModel):
    """Monthly revenue from delivered orders, oldest month first."""
    labels: list[str]
    data: list[Decimal]


class DashboardResponse(BaseModel):
    overview: Overview
    user_stats: UserStats
    recent_orders: list[OrderResponse]
    low_stock_products: list[ProductResponse]
    sales_data: SalesData
