"""
Tests for catalog and tenant services.
"""

import pytest

from ordering.models import Category, Product
from ordering.services.domain.catalog_service import CategoryService, ProductService
from ordering.services.domain.tenant_service import TenantService
from shared.utils.exceptions import (
    DuplicateEntityError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)


class TestCategoryService:

    def test_create_trims_name(self, db_session, seed_tenant):
        category = CategoryService(db_session).create_category(seed_tenant.id, "  Drinks ")

        assert category.name == "Drinks"

    def test_duplicate_name_rejected(self, db_session, seed_tenant, seed_category):
        with pytest.raises(DuplicateEntityError):
            CategoryService(db_session).create_category(seed_tenant.id, "Starters")

    def test_same_name_allowed_for_other_tenant(self, db_session, seed_category, seed_other_tenant):
        category = CategoryService(db_session).create_category(seed_other_tenant.id, "Starters")

        assert category.tenant_id == seed_other_tenant.id

    def test_blank_name_rejected(self, db_session, seed_tenant):
        with pytest.raises(ValidationError):
            CategoryService(db_session).create_category(seed_tenant.id, "   ")

    def test_rename(self, db_session, seed_tenant, seed_category):
        category = CategoryService(db_session).update_category(seed_category.id, seed_tenant.id, "Small Plates")

        assert category.name == "Small Plates"

    def test_rename_to_existing_name_rejected(self, db_session, seed_tenant, seed_category):
        service = CategoryService(db_session)
        service.create_category(seed_tenant.id, "Mains")

        with pytest.raises(DuplicateEntityError):
            service.update_category(seed_category.id, seed_tenant.id, "Mains")

    def test_delete_with_products_rejected(self, db_session, seed_tenant, seed_category, seed_products):
        with pytest.raises(StateConflictError):
            CategoryService(db_session).delete_category(seed_category.id, seed_tenant.id)

        assert db_session.get(Category, seed_category.id) is not None

    def test_delete_empty_category(self, db_session, seed_tenant, seed_category):
        CategoryService(db_session).delete_category(seed_category.id, seed_tenant.id)

        assert db_session.get(Category, seed_category.id) is None

    def test_other_tenant_cannot_touch_category(self, db_session, seed_category, seed_other_tenant):
        with pytest.raises(NotFoundError):
            CategoryService(db_session).delete_category(seed_category.id, seed_other_tenant.id)

    def test_list_with_products_by_name(self, db_session, seed_tenant, seed_products):
        service = CategoryService(db_session)
        service.create_category(seed_tenant.id, "Drinks")

        categories = service.list_categories(seed_tenant.id)

        assert [c.name for c in categories] == ["Drinks", "Starters"]
        assert [p.name for p in categories[1].products] == ["Pho", "Seasonal Soup", "Spring Rolls"]


class TestProductService:

    def test_create_defaults_available(self, db_session, seed_tenant, seed_category):
        product = ProductService(db_session).create_product(
            seed_tenant.id, seed_category.id, "Dumplings", 7000
        )

        assert product.is_available is True
        assert product.price == 7000

    def test_category_of_other_tenant_rejected(self, db_session, seed_category, seed_other_tenant):
        with pytest.raises(NotFoundError):
            ProductService(db_session).create_product(
                seed_other_tenant.id, seed_category.id, "Dumplings", 7000
            )

    @pytest.mark.parametrize("price", [-1, 10.5, "100", None])
    def test_bad_price_rejected(self, db_session, seed_tenant, seed_category, price):
        with pytest.raises(ValidationError):
            ProductService(db_session).create_product(seed_tenant.id, seed_category.id, "Dumplings", price)

    def test_internal_image_url_rejected(self, db_session, seed_tenant, seed_category):
        with pytest.raises(ValidationError):
            ProductService(db_session).create_product(
                seed_tenant.id,
                seed_category.id,
                "Dumplings",
                7000,
                image_url="http://127.0.0.1/admin.png",
            )

    def test_partial_update(self, db_session, seed_tenant, seed_products):
        product = ProductService(db_session).update_product(
            "prod-pho", seed_tenant.id, price=13000, is_available=False
        )

        assert product.price == 13000
        assert product.is_available is False
        assert product.name == "Pho"

    def test_update_unknown_field_rejected(self, db_session, seed_tenant, seed_products):
        with pytest.raises(ValidationError):
            ProductService(db_session).update_product("prod-pho", seed_tenant.id, owner="tenant-u")

    def test_rejected_update_leaves_no_partial_change(self, db_session, seed_tenant, seed_products):
        with pytest.raises(ValidationError):
            ProductService(db_session).update_product("prod-pho", seed_tenant.id, name="Renamed", price=-1)

        db_session.commit()
        db_session.expire_all()
        product = db_session.get(Product, "prod-pho")
        assert product.name == "Pho"
        assert product.price == 12000

    def test_delete(self, db_session, seed_tenant, seed_products):
        service = ProductService(db_session)
        service.delete_product("prod-pho", seed_tenant.id)

        with pytest.raises(NotFoundError):
            service.get_product("prod-pho", seed_tenant.id)


class TestTenantService:

    def test_exists(self, db_session, seed_tenant):
        service = TenantService(db_session)

        assert service.exists(seed_tenant.id) is True
        assert service.exists("missing") is False

    def test_store_menu_hides_unavailable_products(self, db_session, seed_tenant, seed_products):
        store = TenantService(db_session).get_store_by_slug("pho-test")

        assert store.name == "Pho Test"
        assert [c.name for c in store.categories] == ["Starters"]
        assert [p.name for p in store.categories[0].products] == ["Pho", "Spring Rolls"]

    def test_store_applies_default_branding(self, db_session, seed_tenant):
        wire = TenantService(db_session).get_store_by_slug("pho-test").to_wire()

        assert wire["primaryColor"] == "#9333ea"
        assert wire["secondaryColor"] == "#f97316"
        assert wire["logoUrl"] is None
        assert "passwordHash" not in wire

    def test_store_unknown_slug(self, db_session):
        with pytest.raises(NotFoundError):
            TenantService(db_session).get_store_by_slug("nope")

    def test_update_branding(self, db_session, seed_tenant):
        service = TenantService(db_session)

        branding = service.update_branding(seed_tenant.id, primary_color="#abc")

        assert branding.primary_color == "#abc"
        assert branding.secondary_color == "#f97316"

    def test_branding_reset_to_default(self, db_session, seed_other_tenant):
        branding = TenantService(db_session).update_branding(seed_other_tenant.id, primary_color=None)

        assert branding.primary_color == "#9333ea"

    def test_rejected_branding_leaves_no_partial_change(self, db_session, seed_other_tenant):
        service = TenantService(db_session)

        with pytest.raises(ValidationError):
            service.update_branding(seed_other_tenant.id, primary_color="#123456", secondary_color="purple")

        db_session.commit()
        db_session.expire_all()
        assert service.get_tenant(seed_other_tenant.id).primary_color == "#112233"

    @pytest.mark.parametrize("color", ["purple", "#12345", "#ggg", "9333ea"])
    def test_invalid_color_rejected(self, db_session, seed_tenant, color):
        with pytest.raises(ValidationError):
            TenantService(db_session).update_branding(seed_tenant.id, secondary_color=color)
