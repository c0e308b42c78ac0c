"""
Order Domain Service.

Owns the order lifecycle: placement from a table, appending items while
the order is still PENDING, and staff-driven status transitions. Every
mutation commits first and only then publishes to the tenant's rooms.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from shared.config.constants import (
    EventType,
    OrderStatus,
    validate_order_status,
    validate_order_transition,
)
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.exceptions import (
    DatabaseError,
    InvalidTransitionError,
    NotFoundError,
    ProductNotAvailableError,
    StateConflictError,
    TotalMismatchError,
    ValidationError,
)
from shared.utils.schemas import OrderItemInput, OrderOutput
from shared.utils.validators import validate_name

from ordering.models import Order, OrderItem, Product, Tenant
from ordering.services.base_service import BaseService

logger = get_logger(__name__)


class OrderService(BaseService):
    """
    Order lifecycle operations.

    Usage:
        service = OrderService(db, publisher)
        order = service.create_order(tenant_id, "Table 4", items, total=8500)
        service.update_status(order.id, tenant_id, OrderStatus.CONFIRMED)
    """

    # =========================================================================
    # Queries
    # =========================================================================

    def get_order(self, order_id: str) -> Order:
        """
        Get an order with its items (guest order tracking).

        Raises:
            NotFoundError: If the order does not exist
        """
        order = self._db.scalar(
            select(Order).options(selectinload(Order.items)).where(Order.id == order_id)
        )
        if not order:
            raise NotFoundError("Order", order_id)
        return order

    def list_orders(self, tenant_id: str) -> Sequence[Order]:
        """All orders of a tenant, newest first."""
        return self._db.scalars(
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.tenant_id == tenant_id)
            .order_by(Order.created_at.desc())
        ).all()

    @staticmethod
    def to_output(order: Order) -> dict[str, Any]:
        """Wire representation of an order with its items."""
        return OrderOutput.model_validate(order).to_wire()

    # =========================================================================
    # Commands
    # =========================================================================

    def create_order(
        self,
        tenant_id: str,
        table_name: str,
        items: Iterable[OrderItemInput | dict[str, Any]],
        total: int,
    ) -> Order:
        """
        Place a new PENDING order.

        Names and prices are snapshotted from the catalog, never taken from
        the client. Nothing is written unless every product is available.

        Raises:
            ValidationError: Blank table name, no items, bad total, or an
                unavailable product
            NotFoundError: If the tenant does not exist
        """
        table_name = self._validate(
            lambda v: validate_name(v, "tableName"), table_name, "tableName"
        )
        parsed = self._parse_items(items)
        self._check_amount(total, "total")

        try:
            if self._db.get(Tenant, tenant_id) is None:
                raise NotFoundError("Tenant", tenant_id)

            products = self._load_products(tenant_id, parsed)
            amount = self._settle_total(products, parsed, total)

            order = Order(
                tenant_id=tenant_id,
                table_name=table_name,
                status=OrderStatus.PENDING,
                total=amount,
            )
            order.items = self._build_items(products, parsed, start=0)
            self._db.add(order)
        except SQLAlchemyError as e:
            self._rollback()
            raise DatabaseError("create order", error=str(e)) from e
        except Exception:
            self._rollback()
            raise

        self._commit("create order", tenant_id=tenant_id)

        logger.info(
            "Order created",
            order_id=order.id,
            tenant_id=tenant_id,
            items_count=len(parsed),
            total=order.total,
        )

        self._publisher.publish(EventType.NEW_ORDER, tenant_id, self.to_output(order))
        return order

    def add_items(
        self,
        order_id: str,
        items: Iterable[OrderItemInput | dict[str, Any]],
        additional_total: int,
    ) -> Order:
        """
        Append items to a PENDING order and increase its total.

        The order row is locked for the duration of the transaction, so
        concurrent appends and status changes on the same order serialize.

        Raises:
            ValidationError: No items, bad total, or an unavailable product
            NotFoundError: If the order does not exist
            StateConflictError: If the order is no longer PENDING
        """
        parsed = self._parse_items(items)
        self._check_amount(additional_total, "additionalTotal")

        try:
            order = self._db.scalar(
                select(Order).where(Order.id == order_id).with_for_update()
            )
            if not order:
                raise NotFoundError("Order", order_id)

            if order.status != OrderStatus.PENDING:
                raise StateConflictError(
                    "Cannot add items to order. Order status is not PENDING",
                    order_id=order_id,
                    status=order.status,
                )

            products = self._load_products(order.tenant_id, parsed)
            amount = self._settle_total(products, parsed, additional_total)

            order.items.extend(
                self._build_items(products, parsed, start=len(order.items))
            )
            order.total += amount
        except SQLAlchemyError as e:
            self._rollback()
            raise DatabaseError("add items", error=str(e)) from e
        except Exception:
            self._rollback()
            raise

        tenant_id = order.tenant_id
        self._commit("add items", order_id=order_id)

        logger.info(
            "Items added to order",
            order_id=order_id,
            tenant_id=tenant_id,
            items_count=len(parsed),
            total=order.total,
        )

        self._publisher.publish(EventType.ORDER_UPDATED, tenant_id, self.to_output(order))
        return order

    def update_status(self, order_id: str, tenant_id: str, new_status: str) -> Order:
        """
        Move an order along the status state machine.

        Raises:
            ValidationError: If new_status is not a known status
            NotFoundError: If the order does not exist or belongs to another tenant
            InvalidTransitionError: If the transition is not allowed
        """
        if not validate_order_status(new_status):
            raise ValidationError(
                f"Invalid status '{new_status}'. Must be one of {OrderStatus.ALL}",
                field="status",
            )

        try:
            order = self._db.scalar(
                select(Order)
                .where(Order.id == order_id, Order.tenant_id == tenant_id)
                .with_for_update()
            )
            if not order:
                raise NotFoundError("Order", order_id, tenant_id=tenant_id)

            old_status = order.status
            if not validate_order_transition(old_status, new_status):
                raise InvalidTransitionError("Order", old_status, new_status, order_id=order_id)

            order.status = new_status
        except SQLAlchemyError as e:
            self._rollback()
            raise DatabaseError("update order status", error=str(e)) from e
        except Exception:
            self._rollback()
            raise

        self._commit("update order status", order_id=order_id)

        logger.info(
            "Order status updated",
            order_id=order_id,
            tenant_id=tenant_id,
            from_status=old_status,
            to_status=new_status,
        )

        self._publisher.publish(EventType.ORDER_UPDATED, tenant_id, self.to_output(order))
        return order

    # =========================================================================
    # Helpers
    # =========================================================================

    def _parse_items(
        self, items: Iterable[OrderItemInput | dict[str, Any]] | None
    ) -> list[OrderItemInput]:
        parsed: list[OrderItemInput] = []
        for raw in items or []:
            if isinstance(raw, OrderItemInput):
                parsed.append(raw)
                continue
            try:
                parsed.append(OrderItemInput.model_validate(raw))
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid order item: {e.errors()[0]['msg']}", field="items") from e

        if not parsed:
            raise ValidationError("Items are required", field="items")
        return parsed

    @staticmethod
    def _check_amount(amount: Any, field: str) -> None:
        # bool is an int subclass
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise ValidationError(f"{field} must be a positive integer", field=field, value=amount)

    def _load_products(
        self, tenant_id: str, items: list[OrderItemInput]
    ) -> dict[str, Product]:
        """
        Fetch referenced products owned by the tenant and currently available.

        Raises:
            ProductNotAvailableError: For the first item whose product is not in that set
        """
        product_ids = {item.product_id for item in items}
        products = self._db.scalars(
            select(Product).where(
                Product.id.in_(product_ids),
                Product.tenant_id == tenant_id,
                Product.is_available.is_(True),
            )
        ).all()
        lookup = {product.id: product for product in products}

        for item in items:
            if item.product_id not in lookup:
                raise ProductNotAvailableError(item.product_id, tenant_id=tenant_id)
        return lookup

    @staticmethod
    def _settle_total(
        products: dict[str, Product], items: list[OrderItemInput], claimed: int
    ) -> int:
        """
        Amount to record for these items.

        With strict totals the catalog-derived amount must match the claim;
        otherwise the claimed amount is recorded as-is.
        """
        if not settings.order_total_strict:
            return claimed

        expected = sum(products[item.product_id].price * item.quantity for item in items)
        if expected != claimed:
            raise TotalMismatchError(expected, claimed)
        return expected

    @staticmethod
    def _build_items(
        products: dict[str, Product], items: list[OrderItemInput], start: int
    ) -> list[OrderItem]:
        return [
            OrderItem(
                position=start + offset,
                product_name=products[item.product_id].name,
                quantity=item.quantity,
                price=products[item.product_id].price,
                note=item.note,
            )
            for offset, item in enumerate(items)
        ]
