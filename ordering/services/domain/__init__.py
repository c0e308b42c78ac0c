"""
Domain Services.

Services contain business logic and orchestrate operations: they take a
Session, commit, and publish events after commit.

Usage:
    from ordering.services.domain import OrderService

    service = OrderService(db, publisher)
    orders = service.list_orders(tenant_id)
"""

from .catalog_service import CategoryService, ProductService
from .order_service import OrderService
from .table_service import TableService
from .tenant_service import TenantService

__all__ = [
    "CategoryService",
    "ProductService",
    "OrderService",
    "TableService",
    "TenantService",
]
