"""
Shared Pydantic schemas used across the application.

Output schemas serialize with camelCase keys, which is what dashboard and
guest clients consume over both REST and WebSocket.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

OrderStatus = Literal["PENDING", "CONFIRMED", "DONE", "CANCELLED"]
TableStatus = Literal["ACTIVE", "LOCKED"]


class WireModel(BaseModel):
    """Base for schemas that travel over the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-safe dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Order Schemas
# =============================================================================


class OrderItemInput(WireModel):
    """Input for a single item in an order. Prices come from the catalog."""

    product_id: str
    quantity: int = Field(ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    note: str | None = Field(default=None, max_length=Limits.MAX_NOTE_LENGTH)


class OrderItemOutput(WireModel):
    """Output for a single item in an order."""

    id: str
    order_id: str
    product_name: str
    quantity: int
    price: int
    note: str | None = None


class OrderOutput(WireModel):
    """Output for an order with its items."""

    id: str
    tenant_id: str
    table_name: str
    status: OrderStatus
    total: int
    created_at: datetime
    items: list[OrderItemOutput]


# =============================================================================
# Table Schemas
# =============================================================================


class TableOutput(WireModel):
    """Output for a table."""

    id: str
    tenant_id: str
    name: str
    status: TableStatus


class TableEventPayload(WireModel):
    """Payload of table_status_changed and table_paid events."""

    table_id: str
    table_name: str
    tenant_id: str
    status: TableStatus


# =============================================================================
# Catalog Schemas
# =============================================================================


class ProductOutput(WireModel):
    """Output for a product."""

    id: str
    category_id: str
    name: str
    price: int
    is_available: bool
    image_url: str | None = None


class CategoryOutput(WireModel):
    """Output for a category with its products."""

    id: str
    name: str
    products: list[ProductOutput] = []


class BrandingOutput(WireModel):
    """Tenant branding with defaults applied."""

    logo_url: str | None = None
    primary_color: str
    secondary_color: str


class StoreOutput(WireModel):
    """Public menu for a tenant, as shown on guest devices."""

    id: str
    name: str
    slug: str
    logo_url: str | None = None
    primary_color: str
    secondary_color: str
    categories: list[CategoryOutput]
