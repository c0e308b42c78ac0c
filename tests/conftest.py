"""
Pytest configuration and fixtures for the ordering and gateway tests.
"""

from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ordering.models import Base, Category, Product, Table, Tenant
from ordering.services.events import EventPublisher
from shared.security.auth import sign_tenant_token
from ws_gateway.components.data.tenant_lookup import TenantLookup
from ws_gateway.connection_manager import ConnectionManager
from ws_gateway.main import create_app


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# =============================================================================
# Publishing
# =============================================================================


class RecordingBroadcaster:
    """Stands in for the gateway: records every (room, event, payload)."""

    def __init__(self):
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def broadcast(self, room: str, event: str, payload: dict[str, Any]) -> int:
        self.events.append((room, event, payload))
        return 1

    def rooms_for(self, event: str) -> list[str]:
        return [room for room, name, _ in self.events if name == event]

    def names(self) -> list[str]:
        return [name for _, name, _ in self.events]


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def publisher(broadcaster):
    return EventPublisher(broadcaster)


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
def seed_tenant(db_session):
    """Create the main test tenant."""
    tenant = Tenant(
        id="tenant-t",
        name="Pho Test",
        slug="pho-test",
        password_hash="not-a-real-hash",
    )
    db_session.add(tenant)
    db_session.commit()
    db_session.refresh(tenant)
    return tenant


@pytest.fixture
def seed_other_tenant(db_session):
    """Create a second tenant for isolation tests."""
    tenant = Tenant(
        id="tenant-u",
        name="Burger Place",
        slug="burger-place",
        primary_color="#112233",
    )
    db_session.add(tenant)
    db_session.commit()
    db_session.refresh(tenant)
    return tenant


@pytest.fixture
def seed_category(db_session, seed_tenant):
    category = Category(id="cat-starters", tenant_id=seed_tenant.id, name="Starters")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def seed_products(db_session, seed_tenant, seed_category):
    """Spring Rolls and Pho are available, Seasonal Soup is not."""
    products = {
        "spring_rolls": Product(
            id="prod-spring-rolls",
            tenant_id=seed_tenant.id,
            category_id=seed_category.id,
            name="Spring Rolls",
            price=8500,
        ),
        "pho": Product(
            id="prod-pho",
            tenant_id=seed_tenant.id,
            category_id=seed_category.id,
            name="Pho",
            price=12000,
        ),
        "seasonal_soup": Product(
            id="prod-seasonal-soup",
            tenant_id=seed_tenant.id,
            category_id=seed_category.id,
            name="Seasonal Soup",
            price=6000,
            is_available=False,
        ),
    }
    db_session.add_all(products.values())
    db_session.commit()
    return products


@pytest.fixture
def seed_other_product(db_session, seed_other_tenant):
    """An available product that belongs to the other tenant."""
    category = Category(id="cat-burgers", tenant_id=seed_other_tenant.id, name="Burgers")
    product = Product(
        id="prod-burger",
        tenant_id=seed_other_tenant.id,
        category_id=category.id,
        name="Burger",
        price=9000,
    )
    db_session.add_all([category, product])
    db_session.commit()
    return product


@pytest.fixture
def seed_table(db_session, seed_tenant):
    table = Table(id="table-4", tenant_id=seed_tenant.id, name="Table 4")
    db_session.add(table)
    db_session.commit()
    db_session.refresh(table)
    return table


# =============================================================================
# Gateway
# =============================================================================


@pytest.fixture
def manager(db_session):
    """Connection manager whose tenant checks read the test database."""
    return ConnectionManager(tenant_exists=TenantLookup(TestingSessionLocal))


@pytest.fixture
def dashboard_token(seed_tenant):
    """Valid dashboard token for the main tenant."""
    return sign_tenant_token(seed_tenant.id, seed_tenant.slug)


@pytest.fixture
def gateway_client(manager):
    """TestClient for the gateway app around the test manager."""
    with TestClient(create_app(manager)) as client:
        yield client
