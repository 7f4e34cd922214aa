from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.api.deps import get_current_user, require_admin, to_http_exception
from app.database import get_db
from app.models.user import User
from app.schemas.coupon import (
    CouponCreate,
    CouponListResponse,
    CouponResponse,
    CouponStats,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidationResponse,
)
from app.schemas.user import MessageResponse
from app.services.coupon_service import CouponService
from app.services.exceptions import ServiceError

router = APIRouter(prefix="/coupons", tags=["Coupons"])


@router.post(
    "/",
    response_model=CouponResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a coupon",
    description="Create a coupon (admin only). Codes are unique and stored upper-case."
)
def create_coupon(
    coupon_data: CouponCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = CouponService(db)
    try:
        return service.create(coupon_data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get(
    "/",
    response_model=CouponListResponse,
    summary="List coupons",
    description="Paginated coupon list (admin only) with an optional active filter."
)
def list_coupons(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = CouponService(db)
    coupons, total, total_pages = service.get_all(page, page_size, is_active)

    return CouponListResponse(
        items=[CouponResponse.model_validate(c) for c in coupons],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.post(
    "/validate",
    response_model=CouponValidationResponse,
    summary="Validate a coupon",
    description="""
    Check a coupon against a purchase total and preview the discount.

    Validation does not consume the coupon; usage is only counted when an
    order using it is placed.
    """
)
def validate_coupon(
    request: CouponValidateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = CouponService(db)
    try:
        result = service.validate(request.code, request.total_amount)
    except ServiceError as e:
        raise to_http_exception(e)

    return CouponValidationResponse(
        valid=result.valid,
        coupon=CouponResponse.model_validate(result.coupon),
        discount_amount=result.discount_amount,
        final_amount=result.final_amount,
    )


@router.get("/stats", response_model=CouponStats, summary="Coupon statistics")
def coupon_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Totals, active/expired counts, total usage and discount given on live orders."""
    return CouponService(db).get_stats()


@router.get("/{coupon_id}", response_model=CouponResponse, summary="Get coupon by ID")
def get_coupon(
    coupon_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = CouponService(db)
    try:
        return service.get_by_id(coupon_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.put("/{coupon_id}", response_model=CouponResponse, summary="Update a coupon")
def update_coupon(
    coupon_id: int,
    coupon_data: CouponUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = CouponService(db)
    try:
        return service.update(coupon_id, coupon_data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/{coupon_id}", response_model=MessageResponse, summary="Delete a coupon")
def delete_coupon(
    coupon_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Soft delete a coupon."""
    service = CouponService(db)
    try:
        service.delete(coupon_id)
    except ServiceError as e:
        raise to_http_exception(e)

    return {"message": "Coupon deleted successfully"}
