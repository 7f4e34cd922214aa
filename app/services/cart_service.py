from sqlalchemy.orm import Session
from decimal import Decimal

from app.models.cart import Cart, CartItem
from app.models.product import Product
from app.services.coupon_service import quantize
from app.services.exceptions import InsufficientStockError, NotFoundError, ProductNotFoundError


class CartService:
    """
    Shopping cart operations. Cart lines only check stock; nothing is
    reserved until the cart is checked out as an order.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_or_create_cart(self, user_id: int) -> Cart:
        cart = self.db.query(Cart).filter(Cart.user_id == user_id).first()
        if not cart:
            cart = Cart(user_id=user_id)
            self.db.add(cart)
            self.db.commit()
            self.db.refresh(cart)
        return cart

    def summary(self, user_id: int) -> dict:
        """Cart contents priced at current product prices."""
        cart = self.get_or_create_cart(user_id)

        items = []
        total_items = 0
        total_price = Decimal("0")
        for item in cart.items:
            unit_price = quantize(item.product.price)
            line_total = quantize(unit_price * item.quantity)
            total_items += item.quantity
            total_price += line_total
            items.append({
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product.name,
                "unit_price": unit_price,
                "quantity": item.quantity,
                "subtotal": line_total,
            })

        return {
            "id": cart.id,
            "items": items,
            "total_items": total_items,
            "total_price": quantize(total_price),
        }

    def add_item(self, user_id: int, product_id: int, quantity: int) -> dict:
        """
        Add a product to the cart, merging with an existing line.

        Raises:
            ProductNotFoundError: If the product is missing or inactive
            InsufficientStockError: If the resulting quantity exceeds stock
        """
        cart = self.get_or_create_cart(user_id)
        product = (
            self.db.query(Product)
            .filter(Product.id == product_id, Product.is_active.is_(True))
            .first()
        )
        if not product:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")

        item = next((line for line in cart.items if line.product_id == product_id), None)
        new_quantity = quantity + (item.quantity if item else 0)
        if product.stock < new_quantity:
            raise InsufficientStockError(
                f"Insufficient stock. Available: {product.stock}, Requested: {new_quantity}"
            )

        if item:
            item.quantity = new_quantity
        else:
            cart.items.append(CartItem(product_id=product_id, quantity=quantity))

        self.db.commit()
        return self.summary(user_id)

    def update_item(self, user_id: int, item_id: int, quantity: int) -> dict:
        item = self._get_item(user_id, item_id)
        if item.product.stock < quantity:
            raise InsufficientStockError(
                f"Insufficient stock. Available: {item.product.stock}, Requested: {quantity}"
            )

        item.quantity = quantity
        self.db.commit()
        return self.summary(user_id)

    def remove_item(self, user_id: int, item_id: int) -> dict:
        item = self._get_item(user_id, item_id)
        self.db.delete(item)
        self.db.commit()
        return self.summary(user_id)

    def clear(self, user_id: int) -> None:
        cart = self.get_or_create_cart(user_id)
        cart.items.clear()
        self.db.commit()

    def _get_item(self, user_id: int, item_id: int) -> CartItem:
        item = (
            self.db.query(CartItem)
            .join(Cart, CartItem.cart_id == Cart.id)
            .filter(CartItem.id == item_id, Cart.user_id == user_id)
            .first()
        )
        if not item:
            raise NotFoundError(f"Cart item with ID {item_id} not found")
        return item
