"""
Catalog Domain Services: CategoryService, ProductService.

Plain tenant-scoped persistence for the menu. Catalog edits publish no
events; order items keep their own name/price snapshots.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from shared.config.constants import Limits
from shared.config.logging import get_logger
from shared.utils.exceptions import (
    DuplicateEntityError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from shared.utils.validators import validate_image_url, validate_name

from ordering.models import Category, Product, Tenant
from ordering.services.base_service import BaseService

logger = get_logger(__name__)


class CategoryService(BaseService):
    """
    Category CRUD. Names are trimmed and unique per tenant.

    Usage:
        service = CategoryService(db)
        category = service.create_category(tenant_id, "Starters")
    """

    def list_categories(self, tenant_id: str) -> Sequence[Category]:
        """Categories of a tenant with their products, ordered by name."""
        return self._db.scalars(
            select(Category)
            .options(selectinload(Category.products))
            .where(Category.tenant_id == tenant_id)
            .order_by(Category.name)
        ).all()

    def get_category(self, category_id: str, tenant_id: str) -> Category:
        """
        Raises:
            NotFoundError: If the category does not exist or belongs to another tenant
        """
        category = self._db.scalar(
            select(Category).where(
                Category.id == category_id,
                Category.tenant_id == tenant_id,
            )
        )
        if not category:
            raise NotFoundError("Category", category_id, tenant_id=tenant_id)
        return category

    def create_category(self, tenant_id: str, name: str) -> Category:
        """
        Raises:
            ValidationError: If the name is blank
            DuplicateEntityError: If the tenant already has a category with that name
            NotFoundError: If the tenant does not exist
        """
        name = self._validate(validate_name, name, "name")
        if self._db.get(Tenant, tenant_id) is None:
            raise NotFoundError("Tenant", tenant_id)
        self._ensure_unique(tenant_id, name)

        category = Category(tenant_id=tenant_id, name=name)
        self._db.add(category)
        self._commit_unique(name)

        logger.info("Category created", category_id=category.id, tenant_id=tenant_id)
        return category

    def update_category(self, category_id: str, tenant_id: str, name: str) -> Category:
        """
        Rename a category.

        Raises:
            ValidationError: If the name is blank
            DuplicateEntityError: If another category already has that name
            NotFoundError: If the category does not exist or belongs to another tenant
        """
        name = self._validate(validate_name, name, "name")
        category = self.get_category(category_id, tenant_id)
        if name != category.name:
            self._ensure_unique(tenant_id, name, exclude_id=category_id)

        category.name = name
        self._commit_unique(name)

        logger.info("Category updated", category_id=category_id, tenant_id=tenant_id)
        return category

    def delete_category(self, category_id: str, tenant_id: str) -> None:
        """
        Raises:
            NotFoundError: If the category does not exist or belongs to another tenant
            StateConflictError: If the category still has products
        """
        category = self.get_category(category_id, tenant_id)

        product_count = self._db.scalar(
            select(func.count()).select_from(Product).where(Product.category_id == category_id)
        )
        if product_count:
            raise StateConflictError(
                "Cannot delete category with existing products. Delete or move products first.",
                category_id=category_id,
                product_count=product_count,
            )

        self._db.delete(category)
        self._commit("delete category", category_id=category_id)

        logger.info("Category deleted", category_id=category_id, tenant_id=tenant_id)

    def _ensure_unique(self, tenant_id: str, name: str, exclude_id: str | None = None) -> None:
        query = select(Category.id).where(
            Category.tenant_id == tenant_id,
            Category.name == name,
        )
        if exclude_id:
            query = query.where(Category.id != exclude_id)
        if self._db.scalar(query) is not None:
            raise DuplicateEntityError("Category", name, tenant_id=tenant_id)

    def _commit_unique(self, name: str) -> None:
        # A concurrent insert can still trip the unique constraint
        try:
            self._db.commit()
        except IntegrityError as e:
            self._rollback()
            raise DuplicateEntityError("Category", name) from e
        except Exception:
            self._rollback()
            raise


class ProductService(BaseService):
    """
    Product CRUD. A product's category must belong to the same tenant.

    Usage:
        service = ProductService(db)
        product = service.create_product(tenant_id, category_id, "Spring Rolls", 8500)
    """

    def list_products(self, tenant_id: str) -> Sequence[Product]:
        """Products of a tenant ordered by name."""
        return self._db.scalars(
            select(Product).where(Product.tenant_id == tenant_id).order_by(Product.name)
        ).all()

    def get_product(self, product_id: str, tenant_id: str) -> Product:
        """
        Raises:
            NotFoundError: If the product does not exist or belongs to another tenant
        """
        product = self._db.scalar(
            select(Product).where(
                Product.id == product_id,
                Product.tenant_id == tenant_id,
            )
        )
        if not product:
            raise NotFoundError("Product", product_id, tenant_id=tenant_id)
        return product

    def create_product(
        self,
        tenant_id: str,
        category_id: str,
        name: str,
        price: int,
        is_available: bool = True,
        image_url: Optional[str] = None,
    ) -> Product:
        """
        Raises:
            ValidationError: Blank name, bad price, or unsafe image URL
            NotFoundError: If the category does not exist or belongs to another tenant
        """
        name = self._validate(validate_name, name, "name")
        self._check_price(price)
        image_url = self._validate(validate_image_url, image_url, "imageUrl")
        self._check_category(category_id, tenant_id)

        product = Product(
            tenant_id=tenant_id,
            category_id=category_id,
            name=name,
            price=price,
            is_available=bool(is_available),
            image_url=image_url,
        )
        self._db.add(product)
        self._commit("create product", tenant_id=tenant_id)

        logger.info("Product created", product_id=product.id, tenant_id=tenant_id)
        return product

    def update_product(self, product_id: str, tenant_id: str, **changes: Any) -> Product:
        """
        Partially update a product.

        Accepted keys: name, price, category_id, is_available, image_url.
        An empty image_url clears it.

        Raises:
            ValidationError: Unknown field or invalid value
            NotFoundError: If the product or new category is not the tenant's
        """
        allowed = {"name", "price", "category_id", "is_available", "image_url"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Unknown product fields: {sorted(unknown)}", fields=sorted(unknown))

        product = self.get_product(product_id, tenant_id)

        # Validate everything before touching the row
        values: dict[str, Any] = {}
        if "name" in changes:
            values["name"] = self._validate(validate_name, changes["name"], "name")
        if "price" in changes:
            self._check_price(changes["price"])
            values["price"] = changes["price"]
        if "category_id" in changes:
            self._check_category(changes["category_id"], tenant_id)
            values["category_id"] = changes["category_id"]
        if "is_available" in changes:
            values["is_available"] = bool(changes["is_available"])
        if "image_url" in changes:
            values["image_url"] = self._validate(validate_image_url, changes["image_url"], "imageUrl")

        for field, value in values.items():
            setattr(product, field, value)
        self._commit("update product", product_id=product_id)

        logger.info("Product updated", product_id=product_id, fields=sorted(changes))
        return product

    def delete_product(self, product_id: str, tenant_id: str) -> None:
        """
        Raises:
            NotFoundError: If the product does not exist or belongs to another tenant
        """
        product = self.get_product(product_id, tenant_id)
        self._db.delete(product)
        self._commit("delete product", product_id=product_id)

        logger.info("Product deleted", product_id=product_id, tenant_id=tenant_id)

    def _check_category(self, category_id: str, tenant_id: str) -> None:
        owned = self._db.scalar(
            select(Category.id).where(
                Category.id == category_id,
                Category.tenant_id == tenant_id,
            )
        )
        if owned is None:
            raise NotFoundError("Category", category_id, tenant_id=tenant_id)

    @staticmethod
    def _check_price(price: Any) -> None:
        if not isinstance(price, int) or isinstance(price, bool):
            raise ValidationError("Price must be an integer amount", field="price", value=price)
        if price < Limits.MIN_PRICE or price > Limits.MAX_PRICE:
            raise ValidationError(
                f"Price must be between {Limits.MIN_PRICE} and {Limits.MAX_PRICE}",
                field="price",
                value=price,
            )
