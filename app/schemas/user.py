import re
from pydantic import BaseModel, Field, ConfigDict, EmailStr, field_validator
from datetime import datetime
from typing import Optional

from app.models.user import UserRole

_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "one lowercase letter"),
    (re.compile(r"[A-Z]"), "one uppercase letter"),
    (re.compile(r"\d"), "one number"),
    (re.compile(r"[^A-Za-z0-9]"), "one special character"),
)


def check_password_strength(value: str) -> str:
    """Require at least one lowercase, uppercase, digit and special character."""
    missing = [label for pattern, label in _PASSWORD_RULES if not pattern.search(value)]
    if missing:
        raise ValueError("Password must contain at least " + ", ".join(missing))
    return value


class RegisterRequest(BaseModel):
    """Schema for customer self-registration."""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=500)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return check_password_strength(value)


class RegisterAdminRequest(RegisterRequest):
    """Admin registration additionally requires the shared admin secret."""
    admin_secret: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserCreate(RegisterRequest):
    """Schema for an admin creating a user directly."""
    role: UserRole = UserRole.CUSTOMER


class UserUpdate(BaseModel):
    """Profile update. Role and active flag are admin-only."""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = Field(None, max_length=500)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserStatusUpdate(BaseModel):
    is_active: bool


class PasswordUpdate(BaseModel):
    new_password: str = Field(..., min_length=6, max_length=50)

    @field_validator("new_password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return check_password_strength(value)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    avatar: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
