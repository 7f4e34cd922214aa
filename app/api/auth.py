from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, to_http_exception
from app.database import get_db
from app.models.user import User
from app.schemas.user import (
    LoginRequest,
    RegisterAdminRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from app.services.auth_service import AuthService
from app.services.exceptions import ServiceError

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a customer",
    description="Create a customer account. Emails are unique and case-insensitive."
)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new customer.

    - **password**: 6-50 characters with upper, lower, digit and symbol
    """
    service = AuthService(db)
    try:
        return service.register(data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post(
    "/register-admin",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an admin",
    description="Create an admin account. Requires the configured admin secret."
)
def register_admin(data: RegisterAdminRequest, db: Session = Depends(get_db)):
    service = AuthService(db)
    try:
        return service.register_admin(data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in",
    description="Exchange email and password for a bearer token."
)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    service = AuthService(db)
    try:
        return service.login(data)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/profile", response_model=UserResponse, summary="Current user profile")
def profile(user: User = Depends(get_current_user)):
    return user
