"""
Tenant Domain Service.

Tenant lookups used by the gateway (existence checks for room joins), the
public menu shown on guest devices, and branding.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select

from shared.config.constants import Branding
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError
from shared.utils.schemas import (
    BrandingOutput,
    CategoryOutput,
    ProductOutput,
    StoreOutput,
)
from shared.utils.validators import validate_hex_color, validate_image_url

from ordering.models import Category, Product, Tenant
from ordering.services.base_service import BaseService

logger = get_logger(__name__)

# Sentinel for "leave unchanged" in partial updates
_UNSET = object()


class TenantService(BaseService):
    """Tenant lookups, public store menu, and branding."""

    def exists(self, tenant_id: str) -> bool:
        """Whether a tenant with this id exists."""
        return self._db.scalar(select(Tenant.id).where(Tenant.id == tenant_id)) is not None

    def get_tenant(self, tenant_id: str) -> Tenant:
        """
        Raises:
            NotFoundError: If the tenant does not exist
        """
        tenant = self._db.get(Tenant, tenant_id)
        if not tenant:
            raise NotFoundError("Tenant", tenant_id)
        return tenant

    def get_store_by_slug(self, slug: str) -> StoreOutput:
        """
        Public menu for a tenant: every category by name, each with its
        available products by name. The credential is never exposed.

        Raises:
            NotFoundError: If no tenant has this slug
        """
        tenant = self._db.scalar(select(Tenant).where(Tenant.slug == slug))
        if not tenant:
            raise NotFoundError("Restaurant", slug)

        categories = self._db.scalars(
            select(Category)
            .where(Category.tenant_id == tenant.id)
            .order_by(Category.name)
        ).all()
        products = self._db.scalars(
            select(Product)
            .where(Product.tenant_id == tenant.id, Product.is_available.is_(True))
            .order_by(Product.name)
        ).all()

        by_category: dict[str, list[ProductOutput]] = {}
        for product in products:
            by_category.setdefault(product.category_id, []).append(
                ProductOutput.model_validate(product)
            )

        branding = self._branding_of(tenant)
        return StoreOutput(
            id=tenant.id,
            name=tenant.name,
            slug=tenant.slug,
            logo_url=branding.logo_url,
            primary_color=branding.primary_color,
            secondary_color=branding.secondary_color,
            categories=[
                CategoryOutput(
                    id=category.id,
                    name=category.name,
                    products=by_category.get(category.id, []),
                )
                for category in categories
            ],
        )

    def get_branding(self, tenant_id: str) -> BrandingOutput:
        """Branding with defaults applied."""
        return self._branding_of(self.get_tenant(tenant_id))

    def update_branding(
        self,
        tenant_id: str,
        logo_url: Optional[str] | object = _UNSET,
        primary_color: Optional[str] | object = _UNSET,
        secondary_color: Optional[str] | object = _UNSET,
    ) -> BrandingOutput:
        """
        Partially update branding. Passing None resets a field to its default.

        Raises:
            ValidationError: If a color is not #rgb/#rrggbb or the logo URL is unsafe
            NotFoundError: If the tenant does not exist
        """
        tenant = self.get_tenant(tenant_id)

        values: dict[str, Optional[str]] = {}
        if logo_url is not _UNSET:
            values["logo_url"] = self._validate(validate_image_url, logo_url, "logoUrl")
        for field, color, wire_name in (
            ("primary_color", primary_color, "primaryColor"),
            ("secondary_color", secondary_color, "secondaryColor"),
        ):
            if color is _UNSET:
                continue
            values[field] = None if color is None else self._validate(validate_hex_color, color, wire_name)

        for field, value in values.items():
            setattr(tenant, field, value)
        self._commit("update branding", tenant_id=tenant_id)

        logger.info("Branding updated", tenant_id=tenant_id)
        return self._branding_of(tenant)

    @staticmethod
    def _branding_of(tenant: Tenant) -> BrandingOutput:
        return BrandingOutput(
            logo_url=tenant.logo_url or None,
            primary_color=tenant.primary_color or Branding.DEFAULT_PRIMARY_COLOR,
            secondary_color=tenant.secondary_color or Branding.DEFAULT_SECONDARY_COLOR,
        )
