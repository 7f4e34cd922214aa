from sqlalchemy.orm import Session
from sqlalchemy import update
from typing import List, Optional

from app.models.shipping_address import ShippingAddress
from app.models.user import User, UserRole
from app.schemas.shipping_address import ShippingAddressCreate, ShippingAddressUpdate
from app.services.exceptions import ForbiddenError, NotFoundError, ValidationError


class ShippingAddressService:
    """Saved shipping addresses. A user has at most one primary address."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int, data: ShippingAddressCreate) -> ShippingAddress:
        if data.is_primary:
            self._unset_primary(user_id)

        address = ShippingAddress(user_id=user_id, **data.model_dump())
        self.db.add(address)
        self.db.commit()
        self.db.refresh(address)
        return address

    def get_all(self, user_id: int) -> List[ShippingAddress]:
        return (
            self.db.query(ShippingAddress)
            .filter(ShippingAddress.user_id == user_id)
            .order_by(ShippingAddress.is_primary.desc(), ShippingAddress.id.desc())
            .all()
        )

    def get_by_id(self, address_id: int, requester: User) -> ShippingAddress:
        address = self.db.query(ShippingAddress).filter(ShippingAddress.id == address_id).first()
        if not address:
            raise NotFoundError(f"Shipping address with ID {address_id} not found")
        if requester.role != UserRole.ADMIN and address.user_id != requester.id:
            raise ForbiddenError("You can only access your own shipping addresses")
        return address

    def update(self, address_id: int, data: ShippingAddressUpdate, requester: User) -> ShippingAddress:
        address = self.get_by_id(address_id, requester)

        update_data = data.model_dump(exclude_unset=True)
        update_data = {field: value for field, value in update_data.items() if value is not None}
        if update_data.get("is_primary"):
            self._unset_primary(address.user_id, exclude_id=address.id)

        for field, value in update_data.items():
            setattr(address, field, value)

        self.db.commit()
        self.db.refresh(address)
        return address

    def delete(self, address_id: int, requester: User) -> None:
        """
        Delete an address. The user's only address cannot be deleted; deleting
        the primary address promotes the most recent remaining one.
        """
        address = self.get_by_id(address_id, requester)

        others = (
            self.db.query(ShippingAddress)
            .filter(ShippingAddress.user_id == address.user_id, ShippingAddress.id != address.id)
            .order_by(ShippingAddress.id.desc())
            .all()
        )
        if not others:
            raise ValidationError("Cannot delete the only shipping address")

        if address.is_primary:
            others[0].is_primary = True

        self.db.delete(address)
        self.db.commit()

    def set_primary(self, address_id: int, requester: User) -> ShippingAddress:
        address = self.get_by_id(address_id, requester)
        self._unset_primary(address.user_id, exclude_id=address.id)
        address.is_primary = True
        self.db.commit()
        self.db.refresh(address)
        return address

    def get_primary(self, user_id: int) -> Optional[ShippingAddress]:
        """Primary address, or the most recently added one if none is primary."""
        primary = (
            self.db.query(ShippingAddress)
            .filter(ShippingAddress.user_id == user_id, ShippingAddress.is_primary.is_(True))
            .first()
        )
        if primary:
            return primary
        return (
            self.db.query(ShippingAddress)
            .filter(ShippingAddress.user_id == user_id)
            .order_by(ShippingAddress.id.desc())
            .first()
        )

    def _unset_primary(self, user_id: int, exclude_id: Optional[int] = None) -> None:
        conditions = [ShippingAddress.user_id == user_id, ShippingAddress.is_primary.is_(True)]
        if exclude_id is not None:
            conditions.append(ShippingAddress.id != exclude_id)
        self.db.execute(
            update(ShippingAddress)
            .where(*conditions)
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )
