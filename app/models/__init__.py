from app.models.user import User, UserRole
from app.models.category import Category
from app.models.product import Product
from app.models.coupon import Coupon, DiscountType
from app.models.order import Order, OrderItem, OrderStatus
from app.models.review import Review
from app.models.shipping_address import ShippingAddress
from app.models.cart import Cart, CartItem
from app.models.wishlist import Wishlist, WishlistItem

__all__ = [
    "User",
    "UserRole",
    "Category",
    "Product",
    "Coupon",
    "DiscountType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Review",
    "ShippingAddress",
    "Cart",
    "CartItem",
    "Wishlist",
    "WishlistItem",
]
