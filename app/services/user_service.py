from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional, Tuple
import logging

from app.models.order import Order, OPEN_STATUSES
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserUpdate
from app.services.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from app.services.pagination import paginate
from app.utils.security import hash_password

logger = logging.getLogger(__name__)


class UserService:
    """
    Service class for user management.

    Customers may read and edit their own account; admins may manage any
    account but cannot demote, deactivate or delete themselves.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_data: UserCreate) -> User:
        email = user_data.email.lower()
        if self.db.query(User.id).filter(User.email == email).first():
            raise ConflictError("Email already registered")

        user = User(
            name=user_data.name,
            email=email,
            hashed_password=hash_password(user_data.password),
            phone=user_data.phone,
            address=user_data.address,
            role=user_data.role,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[User], int, int]:
        query = self.db.query(User)

        if role:
            query = query.filter(User.role == role)
        if is_active is not None:
            query = query.filter(User.is_active.is_(is_active))
        if search:
            query = query.filter(
                or_(
                    User.name.ilike(f"%{search}%"),
                    User.email.ilike(f"%{search}%"),
                    User.phone.ilike(f"%{search}%"),
                )
            )

        return paginate(query, page, page_size, User.id.desc())

    def get_by_id(self, user_id: int, requester: User) -> User:
        self._require_self_or_admin(user_id, requester, "view")
        return self._get(user_id)

    def update(self, user_id: int, user_data: UserUpdate, requester: User) -> User:
        self._require_self_or_admin(user_id, requester, "update")
        user = self._get(user_id)

        update_data = user_data.model_dump(exclude_unset=True)
        update_data = {field: value for field, value in update_data.items() if value is not None}
        is_admin = requester.role == UserRole.ADMIN

        if "email" in update_data:
            update_data["email"] = update_data["email"].lower()
            if update_data["email"] != user.email:
                if self.db.query(User.id).filter(User.email == update_data["email"]).first():
                    raise ConflictError("Email already exists")

        if "role" in update_data:
            if not is_admin:
                raise ForbiddenError("Only admin can change user role")
            if requester.id == user_id and update_data["role"] != UserRole.ADMIN:
                raise ValidationError("Cannot change your own role from admin")

        if "is_active" in update_data:
            if not is_admin:
                raise ForbiddenError("Only admin can change user status")
            if requester.id == user_id and not update_data["is_active"]:
                raise ValidationError("Cannot deactivate your own account")

        for field, value in update_data.items():
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        return user

    def update_status(self, user_id: int, is_active: bool, requester: User) -> User:
        if requester.id == user_id and not is_active:
            raise ValidationError("Cannot deactivate your own account")

        user = self._get(user_id)
        user.is_active = is_active
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"User #{user_id} active={is_active} set by admin #{requester.id}")
        return user

    def update_password(self, user_id: int, new_password: str, requester: User) -> None:
        self._require_self_or_admin(user_id, requester, "update the password of")
        user = self._get(user_id)
        user.hashed_password = hash_password(new_password)
        self.db.commit()

    def delete(self, user_id: int, requester: User) -> None:
        """
        Soft delete (deactivate) a user.

        Raises:
            ValidationError: If deleting yourself or a user with open orders
        """
        if requester.id == user_id:
            raise ValidationError("Cannot delete your own account")

        user = self._get(user_id)

        open_order = (
            self.db.query(Order.id)
            .filter(Order.user_id == user_id, Order.status.in_(OPEN_STATUSES))
            .first()
        )
        if open_order:
            raise ValidationError("Cannot delete user with active orders")

        user.is_active = False
        self.db.commit()
        logger.info(f"User #{user_id} deactivated by admin #{requester.id}")

    def _get(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    @staticmethod
    def _require_self_or_admin(user_id: int, requester: User, action: str) -> None:
        if requester.role != UserRole.ADMIN and requester.id != user_id:
            raise ForbiddenError(f"You can only {action} your own account")
