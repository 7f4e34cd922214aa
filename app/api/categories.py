from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import require_admin, to_http_exception
from app.database import get_db
from app.models.user import User
from app.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate, CategoryWithCount
from app.schemas.user import MessageResponse
from app.services.category_service import CategoryService
from app.services.exceptions import ServiceError

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.post(
    "/",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
    description="Create a category (admin only). The slug is derived from the name."
)
def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = CategoryService(db)
    try:
        return service.create(category_data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get(
    "/",
    response_model=list[CategoryWithCount],
    summary="List categories",
    description="List categories ordered by name, with their product counts."
)
def list_categories(
    active_only: bool = Query(True, description="Hide soft-deleted categories"),
    db: Session = Depends(get_db)
):
    service = CategoryService(db)
    counts = service.product_counts()
    return [
        CategoryWithCount.model_validate(category).model_copy(
            update={"product_count": counts.get(category.id, 0)}
        )
        for category in service.get_all(active_only)
    ]


@router.get("/slug/{slug}", response_model=CategoryResponse, summary="Get category by slug")
def get_category_by_slug(slug: str, db: Session = Depends(get_db)):
    service = CategoryService(db)
    try:
        return service.get_by_slug(slug)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/{category_id}", response_model=CategoryResponse, summary="Get category by ID")
def get_category(category_id: int, db: Session = Depends(get_db)):
    service = CategoryService(db)
    try:
        return service.get_by_id(category_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Update a category",
    description="Update a category (admin only). Renaming regenerates the slug."
)
def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = CategoryService(db)
    try:
        return service.update(category_id, category_data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    summary="Delete a category",
    description="Soft delete a category (admin only). Refused while it still has products."
)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = CategoryService(db)
    try:
        service.delete(category_id)
    except ServiceError as e:
        raise to_http_exception(e)

    return {"message": "Category deleted successfully"}
