"""
Application services: domain services and event publishing.
"""

from .base_service import BaseService
from .domain import (
    CategoryService,
    OrderService,
    ProductService,
    TableService,
    TenantService,
)
from .events import EventPublisher

__all__ = [
    "BaseService",
    "CategoryService",
    "OrderService",
    "ProductService",
    "TableService",
    "TenantService",
    "EventPublisher",
]
