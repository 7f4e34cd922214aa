from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.api.deps import get_current_user, require_admin, to_http_exception
from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.dashboard import UserStats
from app.schemas.user import (
    MessageResponse,
    PasswordUpdate,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserStatusUpdate,
    UserUpdate,
)
from app.services.dashboard_service import DashboardService
from app.services.exceptions import ServiceError
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    description="Create a user with any role (admin only)."
)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = UserService(db)
    try:
        return service.create(user_data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get(
    "/",
    response_model=UserListResponse,
    summary="List users",
    description="Paginated user list (admin only), filterable by role, status and search text."
)
def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    search: Optional[str] = Query(None, description="Search name, email or phone"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = UserService(db)
    users, total, total_pages = service.get_all(page, page_size, role, is_active, search)

    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get("/stats", response_model=UserStats, summary="User statistics")
def user_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return DashboardService(db).user_stats()


@router.get("/{user_id}", response_model=UserResponse, summary="Get user by ID")
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = UserService(db)
    try:
        return service.get_by_id(user_id, user)
    except ServiceError as e:
        raise to_http_exception(e)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
    description="Update your own profile. Only admins may change role or active status."
)
def update_user(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = UserService(db)
    try:
        return service.update(user_id, user_data, user)
    except ServiceError as e:
        raise to_http_exception(e)


@router.patch("/{user_id}/status", response_model=UserResponse, summary="Activate or deactivate a user")
def update_user_status(
    user_id: int,
    status_data: UserStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = UserService(db)
    try:
        return service.update_status(user_id, status_data.is_active, admin)
    except ServiceError as e:
        raise to_http_exception(e)


@router.patch("/{user_id}/password", response_model=MessageResponse, summary="Change password")
def update_password(
    user_id: int,
    password_data: PasswordUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = UserService(db)
    try:
        service.update_password(user_id, password_data.new_password, user)
    except ServiceError as e:
        raise to_http_exception(e)

    return {"message": "Password updated successfully"}


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete a user",
    description="Deactivate a user (admin only). Refused for yourself and for users with open orders."
)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = UserService(db)
    try:
        service.delete(user_id, admin)
    except ServiceError as e:
        raise to_http_exception(e)

    return {"message": "User deleted successfully"}
