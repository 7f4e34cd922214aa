from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional


class ReviewCreate(BaseModel):
    product_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    id: int
    product_id: int
    user_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewListResponse(BaseModel):
    items: list[ReviewResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class ProductReviewSummary(BaseModel):
    """Reviews of one product with rating statistics."""
    product_id: int
    average_rating: float
    total_reviews: int
    rating_distribution: dict[int, int]
    reviews: list[ReviewResponse]
