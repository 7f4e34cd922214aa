from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from decimal import Decimal
from typing import Optional

from app.api.deps import require_admin, to_http_exception
from app.database import get_db
from app.models.user import User
from app.services.exceptions import ServiceError
from app.services.product_service import ProductService
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ProductSortField,
    SortOrder,
    StockAdjustment,
)
from app.schemas.user import MessageResponse

router = APIRouter(prefix="/products", tags=["Products"])


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a product (admin only). The slug is derived from the name."
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    Create a new product.

    - **name**: Product name (required, must produce a unique slug)
    - **price**: Unit price, non-negative (required)
    - **stock**: Initial stock quantity, non-negative (required)
    - **category_id**: Active category (required)
    """
    service = ProductService(db)
    try:
        return service.create(product_data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get(
    "/",
    response_model=ProductListResponse,
    summary="List products",
    description="Get a paginated list of active products with search, filters and sorting."
)
def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search by name or description"),
    category_id: Optional[int] = Query(None, description="Filter by category"),
    min_price: Optional[Decimal] = Query(None, ge=0, description="Minimum price"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="Maximum price"),
    sort_by: ProductSortField = Query(ProductSortField.CREATED_AT, description="Sort field"),
    sort_order: SortOrder = Query(SortOrder.DESC, description="Sort direction"),
    db: Session = Depends(get_db)
):
    """Get paginated list of products."""
    service = ProductService(db)
    products, total, total_pages = service.get_all(
        page, page_size, search, category_id, min_price, max_price, sort_by, sort_order
    )

    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/slug/{slug}",
    response_model=ProductResponse,
    summary="Get product by slug"
)
def get_product_by_slug(slug: str, db: Session = Depends(get_db)):
    service = ProductService(db)
    try:
        return service.get_by_slug(slug)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    description="Get detailed information about a product. Results are cached in Redis."
)
def get_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    """
    Get a product by ID.

    Served from the Redis cache when possible; the entry is invalidated
    whenever the product or its stock changes.
    """
    service = ProductService(db)
    try:
        return service.get_by_id_cached(product_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    description="Update product details (admin only). Only provided fields are updated."
)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    Update a product.

    Renaming regenerates the slug; the new slug must be unused.
    """
    service = ProductService(db)
    try:
        return service.update(product_id, product_data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.patch(
    "/{product_id}/stock",
    response_model=ProductResponse,
    summary="Adjust product stock",
    description="Increase or decrease stock (admin only). Decreases never go below zero."
)
def adjust_stock(
    product_id: int,
    adjustment: StockAdjustment,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = ProductService(db)
    try:
        return service.adjust_stock(product_id, adjustment.quantity, adjustment.direction)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    summary="Delete a product",
    description="Soft delete a product (admin only). Associated cache is also cleared."
)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Deactivate a product."""
    service = ProductService(db)
    try:
        service.delete(product_id)
    except ServiceError as e:
        raise to_http_exception(e)

    return {"message": "Product deleted successfully"}
