"""
SQLAlchemy ORM Models Package.

- base: Base class, TimestampMixin, id helpers
- tenant: Tenant
- catalog: Category, Product
- table: Table
- order: Order, OrderItem
"""

# Base classes
from .base import Base, TimestampMixin, new_id

# Core tenant model
from .tenant import Tenant

# Catalog (menu structure)
from .catalog import Category, Product

# Tables
from .table import Table

# Orders
from .order import Order, OrderItem

__all__ = [
    "Base",
    "TimestampMixin",
    "new_id",
    "Tenant",
    "Category",
    "Product",
    "Table",
    "Order",
    "OrderItem",
]
