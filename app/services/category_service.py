from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Dict, List, Optional
import logging

from app.models.category import Category
from app.models.product import Product
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.services.exceptions import ConflictError, NotFoundError, ValidationError
from app.utils.slug import slugify

logger = logging.getLogger(__name__)


class CategoryService:
    """Service class for Category CRUD. Categories are only soft-deleted."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, category_data: CategoryCreate) -> Category:
        slug = self._unique_slug(category_data.name)

        category = Category(
            name=category_data.name,
            slug=slug,
            description=category_data.description,
        )
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)

        logger.info(f"Category #{category.id} created with slug '{slug}'")
        return category

    def get_all(self, active_only: bool = True) -> List[Category]:
        query = self.db.query(Category)
        if active_only:
            query = query.filter(Category.is_active.is_(True))
        return query.order_by(Category.name.asc()).all()

    def product_counts(self) -> Dict[int, int]:
        """Number of products (active or not) per category id."""
        rows = (
            self.db.query(Product.category_id, func.count(Product.id))
            .group_by(Product.category_id)
            .all()
        )
        return {category_id: count for category_id, count in rows}

    def get_by_id(self, category_id: int) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError(f"Category with ID {category_id} not found")
        return category

    def get_by_slug(self, slug: str) -> Category:
        category = self.db.query(Category).filter(Category.slug == slug).first()
        if not category:
            raise NotFoundError(f"Category '{slug}' not found")
        return category

    def update(self, category_id: int, category_data: CategoryUpdate) -> Category:
        category = self.get_by_id(category_id)

        update_data = category_data.model_dump(exclude_unset=True)
        update_data = {field: value for field, value in update_data.items() if value is not None}

        if "name" in update_data and update_data["name"] != category.name:
            update_data["slug"] = self._unique_slug(update_data["name"], exclude_id=category.id)

        for field, value in update_data.items():
            setattr(category, field, value)

        self.db.commit()
        self.db.refresh(category)
        return category

    def delete(self, category_id: int) -> None:
        """
        Soft delete a category.

        Raises:
            NotFoundError: If the category does not exist
            ConflictError: If any product still references the category
        """
        category = self.get_by_id(category_id)

        product_count = (
            self.db.query(func.count(Product.id))
            .filter(Product.category_id == category_id)
            .scalar()
        )
        if product_count:
            raise ConflictError("Cannot delete category with existing products")

        category.is_active = False
        self.db.commit()
        logger.info(f"Category #{category_id} deactivated")

    def _unique_slug(self, name: str, exclude_id: Optional[int] = None) -> str:
        slug = slugify(name)
        if not slug:
            raise ValidationError("Category name must contain letters or digits")

        query = self.db.query(Category.id).filter(Category.slug == slug)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first():
            raise ConflictError("Category with similar name already exists")
        return slug
