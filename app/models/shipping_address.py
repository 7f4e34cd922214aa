from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func

from app.database import Base


class ShippingAddress(Base):
    """Saved delivery address. At most one per user is primary."""
    __tablename__ = "shipping_addresses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    label = Column(String(50), nullable=False)
    recipient = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False)
    address = Column(String(500), nullable=False)
    city = Column(String(100), nullable=False)
    province = Column(String(100), nullable=False)
    postal_code = Column(String(20), nullable=False)
    is_primary = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def one_line(self) -> str:
        """Format the address as the free text stored on orders."""
        return (
            f"{self.recipient} ({self.phone}), {self.address}, "
            f"{self.city}, {self.province} {self.postal_code}"
        )

    def __repr__(self):
        return f"<ShippingAddress(id={self.id}, user_id={self.user_id}, primary={self.is_primary})>"
