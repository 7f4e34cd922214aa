from sqlalchemy.orm import Session
from sqlalchemy import update, or_
from typing import Optional, List, Tuple
import logging

from app.models.category import Category
from app.models.product import Product
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductSortField,
    SortOrder,
    StockDirection,
)
from app.services.exceptions import (
    ConflictError,
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from app.services.pagination import paginate
from app.utils.cache import cache_service
from app.utils.slug import slugify

logger = logging.getLogger(__name__)


class ProductService:
    """
    Service class for Product operations.

    This service handles:
    - Creating products (slug derived from the name)
    - Reading products (detail reads go through the Redis cache)
    - Updating and soft-deleting products
    - The stock ledger: conditional stock increments and decrements
    - Cache invalidation
    """

    CACHE_PREFIX = "product"

    def __init__(self, db: Session):
        self.db = db

    def create(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Raises:
            ValidationError: If the category is missing/inactive or the name has no slug
            ConflictError: If another product already uses the derived slug
        """
        self._require_active_category(product_data.category_id)
        slug = self._unique_slug(product_data.name)

        product = Product(
            name=product_data.name,
            slug=slug,
            description=product_data.description,
            price=product_data.price,
            stock=product_data.stock,
            category_id=product_data.category_id,
            images=list(product_data.images),
        )
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)

        logger.info(f"Product #{product.id} created with slug '{slug}'")
        return product

    def get_by_id(self, product_id: int, include_inactive: bool = False) -> Product:
        """
        Get a product by ID.

        Raises:
            ProductNotFoundError: If the product does not exist (or is inactive)
        """
        query = self.db.query(Product).filter(Product.id == product_id)
        if not include_inactive:
            query = query.filter(Product.is_active.is_(True))

        product = query.first()
        if not product:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")
        return product

    def get_by_id_cached(self, product_id: int) -> dict:
        """
        Get product details from cache or database.
        Returns a dictionary (suitable for API response).
        """
        cached = cache_service.get(self.CACHE_PREFIX, str(product_id))
        if cached:
            return cached

        product = self.get_by_id(product_id)
        product_dict = ProductResponse.model_validate(product).model_dump(mode="json")
        cache_service.set(self.CACHE_PREFIX, str(product_id), product_dict)
        return product_dict

    def get_by_slug(self, slug: str) -> Product:
        product = (
            self.db.query(Product)
            .filter(Product.slug == slug, Product.is_active.is_(True))
            .first()
        )
        if not product:
            raise ProductNotFoundError(f"Product '{slug}' not found")
        return product

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str = None,
        category_id: int = None,
        min_price=None,
        max_price=None,
        sort_by: ProductSortField = ProductSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> Tuple[List[Product], int, int]:
        """
        Get paginated list of active products.

        Args:
            page: Page number (1-indexed)
            page_size: Number of items per page
            search: Optional search term matched against name and description
            category_id: Restrict to one category
            min_price: Inclusive lower price bound
            max_price: Inclusive upper price bound
            sort_by: Column to sort on
            sort_order: asc or desc

        Returns:
            Tuple of (products list, total count, total pages)
        """
        query = self.db.query(Product).filter(Product.is_active.is_(True))

        if search:
            query = query.filter(
                or_(
                    Product.name.ilike(f"%{search}%"),
                    Product.description.ilike(f"%{search}%"),
                )
            )
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        if min_price is not None:
            query = query.filter(Product.price >= min_price)
        if max_price is not None:
            query = query.filter(Product.price <= max_price)

        column = getattr(Product, ProductSortField(sort_by).value)
        ordering = column.asc() if sort_order == SortOrder.ASC else column.desc()

        return paginate(query, page, page_size, ordering, Product.id.desc())

    def update(self, product_id: int, product_data: ProductUpdate) -> Product:
        """
        Update an existing product. Renaming regenerates the slug.

        Raises:
            ProductNotFoundError: If the product does not exist
            ValidationError: If the new category is missing or inactive
            ConflictError: If the new slug collides with another product
        """
        product = self.get_by_id(product_id, include_inactive=True)

        update_data = product_data.model_dump(exclude_unset=True)
        update_data = {field: value for field, value in update_data.items() if value is not None}

        if "category_id" in update_data and update_data["category_id"] != product.category_id:
            self._require_active_category(update_data["category_id"])

        if "name" in update_data and update_data["name"] != product.name:
            update_data["slug"] = self._unique_slug(update_data["name"], exclude_id=product.id)

        for field, value in update_data.items():
            setattr(product, field, value)

        self.db.commit()
        self.db.refresh(product)

        self._invalidate_cache(product_id)

        return product

    def delete(self, product_id: int) -> None:
        """Soft delete a product (the row and its slug stay reserved)."""
        product = self.get_by_id(product_id, include_inactive=True)

        product.is_active = False
        self.db.commit()

        self._invalidate_cache(product_id)
        logger.info(f"Product #{product_id} deactivated")

    def adjust_stock(self, product_id: int, quantity: int, direction: StockDirection) -> Product:
        """
        Apply a signed stock change and commit it.

        The change is a single conditional UPDATE, so concurrent decrements
        can never drive stock below zero.

        Raises:
            ProductNotFoundError: If the product does not exist or is inactive
            InsufficientStockError: If a decrease would make stock negative
        """
        product = self.get_by_id(product_id)

        if direction == StockDirection.INCREASE:
            applied = self.increment_stock(product_id, quantity)
        else:
            applied = self.decrement_stock(product_id, quantity)

        if not applied:
            self.db.rollback()
            raise InsufficientStockError(
                f"Insufficient stock. Available: {product.stock}, Requested: {quantity}"
            )

        self.db.commit()
        self.db.refresh(product)
        self._invalidate_cache(product_id)

        logger.info(f"Stock of product #{product_id} adjusted ({direction.value} {quantity}) to {product.stock}")
        return product

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Remove ``quantity`` units inside the current transaction.

        Returns False (and changes nothing) when the product is inactive or
        holds fewer than ``quantity`` units. The caller commits.
        """
        result = self.db.execute(
            update(Product)
            .where(
                Product.id == product_id,
                Product.is_active.is_(True),
                Product.stock >= quantity,
            )
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def increment_stock(self, product_id: int, quantity: int, include_inactive: bool = False) -> bool:
        """Add ``quantity`` units inside the current transaction. The caller commits."""
        conditions = [Product.id == product_id]
        if not include_inactive:
            conditions.append(Product.is_active.is_(True))

        result = self.db.execute(
            update(Product)
            .where(*conditions)
            .values(stock=Product.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def invalidate(self, product_ids) -> None:
        """Drop cached details for several products."""
        cache_service.delete_many(self.CACHE_PREFIX, product_ids)

    def _require_active_category(self, category_id: int) -> Category:
        category = (
            self.db.query(Category)
            .filter(Category.id == category_id, Category.is_active.is_(True))
            .first()
        )
        if not category:
            raise ValidationError(f"Category with ID {category_id} not found")
        return category

    def _unique_slug(self, name: str, exclude_id: Optional[int] = None) -> str:
        slug = slugify(name)
        if not slug:
            raise ValidationError("Product name must contain letters or digits")

        query = self.db.query(Product.id).filter(Product.slug == slug)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise ConflictError("Product with similar name already exists")
        return slug

    def _invalidate_cache(self, product_id: int) -> None:
        """Invalidate cache for a product."""
        cache_service.delete(self.CACHE_PREFIX, str(product_id))
