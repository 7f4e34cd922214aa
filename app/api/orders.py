from fastapi import APIRouter, Depends, Query, status
from kombu.exceptions import OperationalError
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.api.deps import get_current_user, require_admin, to_http_exception
from app.database import get_db
from app.models.order import OrderStatus
from app.models.user import User
from app.services.exceptions import ServiceError
from app.services.order_service import OrderService
from app.schemas.order import (
    CheckoutRequest,
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderStats,
    OrderStatusUpdate,
)
from app.tasks.order_tasks import send_order_confirmation

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


def enqueue_confirmation(order_id: int) -> None:
    """Queue the confirmation for a committed order; a broker outage only gets logged."""
    try:
        send_order_confirmation.delay(order_id)
    except (OperationalError, OSError) as e:
        logger.error(f"Could not queue confirmation for order #{order_id}: {e}")


@router.post(
    "/",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new order (purchase)",
    description="""
    Purchase one or more products in a single order.

    **Atomicity:**
    Product rows are locked with SELECT FOR UPDATE and every stock decrement
    is conditional. If any line lacks stock, or the coupon cannot be applied,
    no order is created and no stock or coupon usage changes.

    After the order commits, a Celery task sends the confirmation.
    """
)
def create_order(
    order_data: OrderCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Create a purchase order.

    - **items**: Products and quantities; repeated products are merged
    - **shipping_address**: Delivery address (required)
    - **coupon_code**: Coupon to apply to the subtotal (optional)

    Each call creates a distinct order.
    """
    service = OrderService(db)
    try:
        order = service.create_order(user.id, order_data)
    except ServiceError as e:
        raise to_http_exception(e)

    enqueue_confirmation(order.id)
    return order


@router.post(
    "/checkout/cart",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Checkout the cart",
    description="Place an order for every item in the caller's cart and empty the cart."
)
def checkout_cart(
    checkout: CheckoutRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = OrderService(db)
    try:
        order = service.create_order_from_cart(user.id, checkout)
    except ServiceError as e:
        raise to_http_exception(e)

    enqueue_confirmation(order.id)
    return order


@router.get(
    "/",
    response_model=OrderListResponse,
    summary="List orders",
    description="Paginated list of the caller's orders (admins see all) with optional status filter."
)
def list_orders(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    status: Optional[OrderStatus] = Query(None, description="Filter by order status"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Get paginated list of orders."""
    service = OrderService(db)
    orders, total, total_pages = service.get_orders(user, page, page_size, status)

    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/stats/summary",
    response_model=OrderStats,
    summary="Order statistics",
    description="Order count and summed totals (admin only)."
)
def order_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return OrderService(db).get_stats()


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order by ID",
    description="Get an order with its items. Customers can only read their own orders."
)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = OrderService(db)
    try:
        return service.get_order(order_id, user)
    except ServiceError as e:
        raise to_http_exception(e)


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    summary="Update order status",
    description="Move an order to a new status (admin only). Cancelling restores stock."
)
def update_order_status(
    order_id: int,
    status_data: OrderStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = OrderService(db)
    try:
        return service.update_status(order_id, status_data.status)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post(
    "/{order_id}/cancel",
    response_model=OrderResponse,
    summary="Cancel an order",
    description="""
    Cancel a pending or processing order.

    Stock of every line is restored and the coupon usage is released in the
    same transaction.
    """
)
def cancel_order(
    order_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = OrderService(db)
    try:
        return service.cancel_order(order_id, user)
    except ServiceError as e:
        raise to_http_exception(e)
