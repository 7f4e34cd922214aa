from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from app.models.product import Product
from app.models.wishlist import Wishlist, WishlistItem
from app.services.coupon_service import quantize
from app.services.exceptions import ConflictError, NotFoundError, ProductNotFoundError

logger = logging.getLogger(__name__)


class WishlistService:
    """Products a customer saved for later. Unlike the cart, no stock check applies."""

    def __init__(self, db: Session):
        self.db = db

    def get_or_create_wishlist(self, user_id: int) -> Wishlist:
        wishlist = self.db.query(Wishlist).filter(Wishlist.user_id == user_id).first()
        if not wishlist:
            wishlist = Wishlist(user_id=user_id)
            self.db.add(wishlist)
            self.db.commit()
            self.db.refresh(wishlist)
        return wishlist

    def summary(self, user_id: int) -> dict:
        wishlist = self.get_or_create_wishlist(user_id)
        items = [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product.name,
                "slug": item.product.slug,
                "price": quantize(item.product.price),
                "available": bool(item.product.is_active and item.product.stock > 0),
                "added_at": item.added_at,
            }
            for item in wishlist.items
        ]
        return {"id": wishlist.id, "items": items, "total_items": len(items)}

    def add_item(self, user_id: int, product_id: int) -> dict:
        """
        Save a product to the wishlist.

        Raises:
            ProductNotFoundError: If the product is missing or inactive
            ConflictError: If the product is already saved
        """
        wishlist = self.get_or_create_wishlist(user_id)
        product = (
            self.db.query(Product)
            .filter(Product.id == product_id, Product.is_active.is_(True))
            .first()
        )
        if not product:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")

        if any(item.product_id == product_id for item in wishlist.items):
            raise ConflictError("Product already in wishlist")

        wishlist.items.append(WishlistItem(product_id=product_id))
        try:
            self.db.commit()
        except IntegrityError:
            # Same product saved by a parallel request
            self.db.rollback()
            raise ConflictError("Product already in wishlist")

        logger.info(f"User #{user_id} saved product #{product_id} to wishlist")
        return self.summary(user_id)

    def remove_item(self, user_id: int, product_id: int) -> dict:
        item = self._get_item(user_id, product_id)
        self.db.delete(item)
        self.db.commit()
        return self.summary(user_id)

    def contains(self, user_id: int, product_id: int) -> bool:
        return self._find_item(user_id, product_id) is not None

    def clear(self, user_id: int) -> None:
        wishlist = self.get_or_create_wishlist(user_id)
        wishlist.items.clear()
        self.db.commit()

    def _find_item(self, user_id: int, product_id: int):
        return (
            self.db.query(WishlistItem)
            .join(Wishlist, WishlistItem.wishlist_id == Wishlist.id)
            .filter(Wishlist.user_id == user_id, WishlistItem.product_id == product_id)
            .first()
        )

    def _get_item(self, user_id: int, product_id: int) -> WishlistItem:
        item = self._find_item(user_id, product_id)
        if not item:
            raise NotFoundError(f"Product with ID {product_id} is not in the wishlist")
        return item
