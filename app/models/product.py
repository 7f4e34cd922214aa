from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Boolean, DateTime, ForeignKey, JSON, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Product(Base):
    """
    Product model representing items available for sale.

    Attributes:
        id: Unique identifier for the product
        name: Product name
        slug: URL identifier derived from the name, unique across active and inactive products
        description: Optional long description
        price: Unit price (exact decimal)
        stock: Available quantity (must be non-negative)
        category_id: Owning category
        images: List of image URLs
        is_active: False once the product has been soft-deleted
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    slug = Column(String(280), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    images = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Database-level constraints to ensure data integrity
    __table_args__ = (
        CheckConstraint('price >= 0', name='check_price_non_negative'),
        CheckConstraint('stock >= 0', name='check_stock_non_negative'),
    )

    category = relationship("Category", backref="products")

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock})>"
