from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.api.deps import get_current_user, to_http_exception
from app.database import get_db
from app.models.user import User
from app.schemas.review import (
    ProductReviewSummary,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from app.schemas.user import MessageResponse
from app.services.exceptions import ServiceError
from app.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post(
    "/",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a product",
    description="""
    Add a review for a product.

    Only customers with a delivered order containing the product may review
    it, and only once per product.
    """
)
def create_review(
    review_data: ReviewCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = ReviewService(db)
    try:
        return service.create(user.id, review_data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/", response_model=ReviewListResponse, summary="List reviews")
def list_reviews(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    product_id: Optional[int] = Query(None, description="Filter by product"),
    db: Session = Depends(get_db),
):
    service = ReviewService(db)
    reviews, total, total_pages = service.get_all(page, page_size, product_id=product_id)

    return ReviewListResponse(
        items=[ReviewResponse.model_validate(r) for r in reviews],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get("/me", response_model=ReviewListResponse, summary="List my reviews")
def list_my_reviews(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = ReviewService(db)
    reviews, total, total_pages = service.get_all(page, page_size, user_id=user.id)

    return ReviewListResponse(
        items=[ReviewResponse.model_validate(r) for r in reviews],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/product/{product_id}",
    response_model=ProductReviewSummary,
    summary="Product review summary",
    description="Average rating, review count, 1-5 star distribution and latest reviews."
)
def product_review_summary(product_id: int, db: Session = Depends(get_db)):
    return ReviewService(db).product_summary(product_id)


@router.get("/{review_id}", response_model=ReviewResponse, summary="Get review by ID")
def get_review(review_id: int, db: Session = Depends(get_db)):
    service = ReviewService(db)
    try:
        return service.get_by_id(review_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.put("/{review_id}", response_model=ReviewResponse, summary="Update my review")
def update_review(
    review_id: int,
    review_data: ReviewUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = ReviewService(db)
    try:
        return service.update(review_id, user.id, review_data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/{review_id}", response_model=MessageResponse, summary="Delete a review")
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Owners can delete their own reviews; admins can delete any."""
    service = ReviewService(db)
    try:
        service.delete(review_id, user)
    except ServiceError as e:
        raise to_http_exception(e)

    return {"message": "Review deleted successfully"}
