from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional, Tuple
import logging

from app.models.order import Order, OrderItem, OrderStatus
from app.models.product import Product
from app.models.review import Review
from app.models.user import User, UserRole
from app.schemas.review import ReviewCreate, ReviewUpdate
from app.services.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ProductNotFoundError,
)
from app.services.pagination import paginate

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Product reviews. Only customers with a delivered order containing the
    product may review it, once per product.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int, review_data: ReviewCreate) -> Review:
        product = (
            self.db.query(Product)
            .filter(Product.id == review_data.product_id, Product.is_active.is_(True))
            .first()
        )
        if not product:
            raise ProductNotFoundError(f"Product with ID {review_data.product_id} not found")

        purchased = (
            self.db.query(Order.id)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .filter(
                Order.user_id == user_id,
                Order.status == OrderStatus.DELIVERED,
                OrderItem.product_id == review_data.product_id,
            )
            .first()
        )
        if not purchased:
            raise ForbiddenError("You must purchase this product before reviewing")

        existing = (
            self.db.query(Review.id)
            .filter(Review.product_id == review_data.product_id, Review.user_id == user_id)
            .first()
        )
        if existing:
            raise ConflictError("You have already reviewed this product")

        review = Review(
            product_id=review_data.product_id,
            user_id=user_id,
            rating=review_data.rating,
            comment=review_data.comment,
        )
        self.db.add(review)
        self.db.commit()
        self.db.refresh(review)

        logger.info(f"Review #{review.id} added to product #{review.product_id}")
        return review

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        product_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Tuple[List[Review], int, int]:
        query = self.db.query(Review).filter(Review.is_active.is_(True))
        if product_id is not None:
            query = query.filter(Review.product_id == product_id)
        if user_id is not None:
            query = query.filter(Review.user_id == user_id)
        return paginate(query, page, page_size, Review.id.desc())

    def get_by_id(self, review_id: int) -> Review:
        review = (
            self.db.query(Review)
            .filter(Review.id == review_id, Review.is_active.is_(True))
            .first()
        )
        if not review:
            raise NotFoundError(f"Review with ID {review_id} not found")
        return review

    def update(self, review_id: int, user_id: int, review_data: ReviewUpdate) -> Review:
        review = self.get_by_id(review_id)
        if review.user_id != user_id:
            raise ForbiddenError("You can only update your own reviews")

        for field, value in review_data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(review, field, value)

        self.db.commit()
        self.db.refresh(review)
        return review

    def delete(self, review_id: int, requester: User) -> None:
        review = self.get_by_id(review_id)
        if requester.role != UserRole.ADMIN and review.user_id != requester.id:
            raise ForbiddenError("You can only delete your own reviews")

        review.is_active = False
        self.db.commit()

    def product_summary(self, product_id: int, limit: int = 50) -> dict:
        """Average rating, count, 1-5 distribution and latest reviews of a product."""
        base = self.db.query(Review).filter(
            Review.product_id == product_id, Review.is_active.is_(True)
        )

        average, total = (
            base.with_entities(func.avg(Review.rating), func.count(Review.id)).one()
        )

        distribution = {rating: 0 for rating in range(1, 6)}
        rows = (
            base.with_entities(Review.rating, func.count(Review.id))
            .group_by(Review.rating)
            .all()
        )
        for rating, count in rows:
            distribution[rating] = count

        reviews = base.order_by(Review.id.desc()).limit(limit).all()

        return {
            "product_id": product_id,
            "average_rating": round(float(average or 0), 2),
            "total_reviews": total,
            "rating_distribution": distribution,
            "reviews": reviews,
        }
