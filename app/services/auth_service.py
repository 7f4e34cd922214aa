from sqlalchemy.orm import Session
import logging
import secrets

import jwt

from app.config import get_settings
from app.models.user import User, UserRole
from app.schemas.user import LoginRequest, RegisterAdminRequest, RegisterRequest
from app.services.exceptions import ConflictError, UnauthorizedError
from app.utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

settings = get_settings()


class AuthService:
    """Registration, login and token resolution."""

    def __init__(self, db: Session):
        self.db = db

    def register(self, data: RegisterRequest, role: UserRole = UserRole.CUSTOMER) -> User:
        """
        Create a new account.

        Raises:
            ConflictError: If the email is already registered
        """
        email = data.email.lower()
        if self.db.query(User.id).filter(User.email == email).first():
            raise ConflictError("Email already registered")

        user = User(
            name=data.name,
            email=email,
            hashed_password=hash_password(data.password),
            phone=data.phone,
            address=data.address,
            role=role,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"User #{user.id} registered as {role.value}")
        return user

    def register_admin(self, data: RegisterAdminRequest) -> User:
        """
        Create an admin account; requires the configured admin secret.

        Raises:
            UnauthorizedError: If the admin secret does not match
        """
        if not secrets.compare_digest(data.admin_secret, settings.ADMIN_SECRET):
            logger.warning(f"Rejected admin registration for {data.email}: bad admin secret")
            raise UnauthorizedError("Invalid admin secret")
        return self.register(data, role=UserRole.ADMIN)

    def authenticate(self, email: str, password: str) -> User:
        user = (
            self.db.query(User)
            .filter(User.email == email.lower(), User.is_active.is_(True))
            .first()
        )
        if not user or not verify_password(password, user.hashed_password):
            raise UnauthorizedError("Invalid credentials")
        return user

    def login(self, data: LoginRequest) -> dict:
        user = self.authenticate(data.email, data.password)
        token = create_access_token(user.id, user.email, user.role.value)
        return {"access_token": token, "token_type": "bearer", "user": user}

    def resolve_token(self, token: str) -> User:
        """
        Map a bearer token to an active user.

        Raises:
            UnauthorizedError: If the token is invalid, expired or names an inactive user
        """
        try:
            payload = decode_access_token(token)
            user_id = int(payload["sub"])
        except (jwt.PyJWTError, KeyError, ValueError):
            raise UnauthorizedError("Invalid or expired token")

        user = (
            self.db.query(User)
            .filter(User.id == user_id, User.is_active.is_(True))
            .first()
        )
        if not user:
            raise UnauthorizedError("User not found or inactive")
        return user
