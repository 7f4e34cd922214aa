from sqlalchemy.orm import Session
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
import logging
import secrets

from app.models.cart import Cart
from app.models.order import Order, OrderItem, OrderStatus, CANCELLABLE_STATUSES, STATUS_FLOW
from app.models.product import Product
from app.models.user import User, UserRole
from app.schemas.order import CheckoutRequest, OrderCreate
from app.services.coupon_service import CouponService, quantize
from app.services.exceptions import (
    ConflictError,
    ForbiddenError,
    InsufficientStockError,
    NotFoundError,
    ProductNotFoundError,
    ServiceError,
    UsageLimitExceededError,
    ValidationError,
)
from app.services.pagination import paginate
from app.services.product_service import ProductService
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


def generate_order_number() -> str:
    return f"ORD-{utcnow():%Y%m%d%H%M%S}-{secrets.token_hex(3).upper()}"


def merge_lines(lines: Iterable[Tuple[int, int]]) -> Dict[int, int]:
    """Sum quantities per product id, keeping first-seen order."""
    quantities: Dict[int, int] = {}
    for product_id, quantity in lines:
        quantities[product_id] = quantities.get(product_id, 0) + quantity
    return quantities


class OrderService:
    """
    Service class for Order operations.

    STOCK AND COUPON CONSISTENCY:
    =============================
    Placing an order is one unit of work. Inside a single transaction we:

    1. Lock every referenced product row (SELECT ... FOR UPDATE, in id order)
    2. Check each requested quantity against the locked stock
    3. Price the lines from the locked rows (unit price snapshot)
    4. Lock and validate the coupon, if one was given
    5. Insert the order header and its line items
    6. Decrement stock with conditional UPDATEs (stock >= quantity)
    7. Count the coupon use
    8. Commit, or roll back everything on the first failure

    Nothing is written before steps 1-4 have passed, and a failure in any
    later step leaves no order, no stock change and no coupon usage behind.
    """

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductService(db)
        self.coupons = CouponService(db)

    def create_order(self, user_id: int, order_data: OrderCreate) -> Order:
        """
        Create a new order from an explicit item list.

        Raises:
            ProductNotFoundError: If a product doesn't exist or is inactive
            InsufficientStockError: If not enough stock is available
            CouponNotFoundError, CouponExpiredError, UsageLimitExceededError,
            MinimumPurchaseNotMetError: If the coupon cannot be applied
        """
        lines = [(item.product_id, item.quantity) for item in order_data.items]
        return self._place_order(
            user_id,
            lines,
            shipping_address=order_data.shipping_address,
            coupon_code=order_data.coupon_code,
            notes=order_data.notes,
        )

    def create_order_from_cart(self, user_id: int, checkout: CheckoutRequest) -> Order:
        """
        Place an order for everything in the user's cart and empty the cart
        in the same transaction.

        Raises:
            ValidationError: If the cart is empty
        """
        cart = self.db.query(Cart).filter(Cart.user_id == user_id).first()
        if not cart or not cart.items:
            raise ValidationError("Cart is empty")

        lines = [(item.product_id, item.quantity) for item in cart.items]
        return self._place_order(
            user_id,
            lines,
            shipping_address=checkout.shipping_address,
            coupon_code=checkout.coupon_code,
            notes=checkout.notes,
            cart=cart,
        )

    def _place_order(
        self,
        user_id: int,
        lines: List[Tuple[int, int]],
        shipping_address: str,
        coupon_code: Optional[str] = None,
        notes: Optional[str] = None,
        cart: Optional[Cart] = None,
    ) -> Order:
        quantities = merge_lines(lines)

        try:
            locked = (
                self.db.query(Product)
                .filter(Product.id.in_(list(quantities)))
                .order_by(Product.id)
                .with_for_update()
                .all()
            )
            products = {product.id: product for product in locked}

            for product_id, quantity in quantities.items():
                product = products.get(product_id)
                if product is None or not product.is_active:
                    raise ProductNotFoundError(f"Product with ID {product_id} not found")
                if product.stock < quantity:
                    raise InsufficientStockError(
                        f"Insufficient stock for {product.name}. "
                        f"Available: {product.stock}, Requested: {quantity}"
                    )

            items = []
            subtotal = Decimal("0")
            for product_id, quantity in quantities.items():
                unit_price = quantize(products[product_id].price)
                line_total = quantize(unit_price * quantity)
                subtotal += line_total
                items.append(
                    OrderItem(
                        product_id=product_id,
                        quantity=quantity,
                        unit_price=unit_price,
                        subtotal=line_total,
                    )
                )

            coupon = None
            discount = Decimal("0.00")
            if coupon_code:
                validation = self.coupons.validate(coupon_code, subtotal, lock=True)
                coupon = validation.coupon
                discount = validation.discount_amount

            order = Order(
                order_number=generate_order_number(),
                user_id=user_id,
                subtotal=quantize(subtotal),
                discount_amount=discount,
                total_amount=quantize(subtotal - discount),
                status=OrderStatus.PENDING,
                coupon_id=coupon.id if coupon else None,
                shipping_address=shipping_address,
                notes=notes,
                items=items,
            )
            self.db.add(order)

            for product_id, quantity in quantities.items():
                if not self.products.decrement_stock(product_id, quantity):
                    raise InsufficientStockError(
                        f"Insufficient stock for product {product_id} - concurrent modification detected"
                    )

            if coupon and not self.coupons.redeem(coupon.id):
                raise UsageLimitExceededError(f"Coupon {coupon.code} has reached its usage limit")

            if cart is not None:
                cart.items.clear()

            self.db.commit()
            self.db.refresh(order)

        except ServiceError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error creating order: {e}")
            raise ConflictError("Order could not be placed due to a concurrent modification")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating order: {e}")
            raise

        # Stock changed for every ordered product
        self.products.invalidate(list(quantities))

        logger.info(
            f"Order #{order.id} ({order.order_number}) created for user #{user_id}: "
            f"total {order.total_amount}, discount {order.discount_amount}"
        )
        return order

    def get_order(self, order_id: int, user: User) -> Order:
        """
        Get an order by ID. Customers may only read their own orders.

        Raises:
            NotFoundError: If the order doesn't exist
            ForbiddenError: If the caller is neither the owner nor an admin
        """
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError(f"Order with ID {order_id} not found")
        if user.role != UserRole.ADMIN and order.user_id != user.id:
            raise ForbiddenError("You do not have access to this order")
        return order

    def get_orders(
        self,
        user: User,
        page: int = 1,
        page_size: int = 10,
        status: OrderStatus = None,
    ) -> Tuple[List[Order], int, int]:
        """
        Get paginated list of orders, newest first. Admins see every order.

        Returns:
            Tuple of (orders list, total count, total pages)
        """
        query = self.db.query(Order)

        if user.role != UserRole.ADMIN:
            query = query.filter(Order.user_id == user.id)
        if status:
            query = query.filter(Order.status == status)

        return paginate(query, page, page_size, Order.id.desc())

    def update_status(self, order_id: int, status: OrderStatus) -> Order:
        """
        Move an order to a new status (admin action).

        Orders only move forward through pending, processing, shipped and
        delivered. Cancelling through this path releases stock and coupon
        usage the same way ``cancel_order`` does.
        """
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError(f"Order with ID {order_id} not found")

        if status == OrderStatus.CANCELLED:
            return self._cancel(order)

        current = order.status
        if current == OrderStatus.CANCELLED:
            raise ValidationError("Cancelled orders cannot change status")
        if current == OrderStatus.DELIVERED and status != current:
            raise ValidationError("Delivered orders cannot change status")
        if STATUS_FLOW.index(status) < STATUS_FLOW.index(current):
            raise ValidationError(f"Order cannot move from {current.value} back to {status.value}")

        # Compare-and-set so a concurrent cancel is never overwritten
        result = self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status == current)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            raise ConflictError(f"Order #{order_id} was modified concurrently")

        self.db.commit()
        self.db.refresh(order)

        logger.info(f"Order #{order_id} moved from {current.value} to {status.value}")
        return order

    def cancel_order(self, order_id: int, user: User) -> Order:
        """
        Cancel an order on behalf of its owner (or an admin).

        Raises:
            NotFoundError: If the order doesn't exist
            ForbiddenError: If the caller is neither the owner nor an admin
            ValidationError: If the order is past the cancellable states
        """
        order = self.get_order(order_id, user)
        return self._cancel(order)

    def _cancel(self, order: Order) -> Order:
        """
        Flip the order to cancelled with a conditional UPDATE and give back
        stock and coupon usage only if this call won the flip.
        """
        order_id = order.id
        try:
            result = self.db.execute(
                update(Order)
                .where(Order.id == order_id, Order.status.in_(CANCELLABLE_STATUSES))
                .values(status=OrderStatus.CANCELLED)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ValidationError("Order can only be cancelled while pending or processing")

            for item in order.items:
                self.products.increment_stock(item.product_id, item.quantity, include_inactive=True)
            if order.coupon_id is not None:
                self.coupons.release(order.coupon_id)

            self.db.commit()
            self.db.refresh(order)
        except ServiceError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error cancelling order #{order_id}: {e}")
            raise

        self.products.invalidate(item.product_id for item in order.items)
        logger.info(f"Order #{order_id} cancelled, stock restored")
        return order

    def get_stats(self) -> dict:
        total_orders, total_amount = self.db.query(
            func.count(Order.id),
            func.coalesce(func.sum(Order.total_amount), 0),
        ).one()
        return {"total_orders": total_orders, "total_amount": quantize(total_amount)}
