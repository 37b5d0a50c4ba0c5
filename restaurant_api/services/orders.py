"""
Order Pipeline Service

Places orders and tracks their status.

Placement is one transaction on one connection:

    BEGIN → check menu ids → INSERT order → INSERT every line → COMMIT

Any failure along the way rolls the header back with the lines, so an
order is either fully present (header + all N lines) or absent.

Status workflow (forward only, terminal states are final):

    pending → confirmed → preparing → completed
        └──────────┴───────────┴────→ cancelled

Skipping forward (pending → preparing) is allowed. Re-setting the current
status is a no-op.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.orm import joinedload, selectinload

from restaurant_api.core.errors import NotFound, ValidationError
from restaurant_api.database import Database
from restaurant_api.models import MenuItem, Order, OrderItem, OrderStatus

logger = logging.getLogger(__name__)


# =============================================================================
# STATUS POLICY
# =============================================================================

STATUS_FLOW = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.COMPLETED,
]

TERMINAL_STATUSES = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """Whether an order in ``current`` may move to ``new``."""
    if current == new:
        return True
    if current in TERMINAL_STATUSES:
        return False
    if new == OrderStatus.CANCELLED:
        return True
    return STATUS_FLOW.index(new) > STATUS_FLOW.index(current)


def parse_status(value: str) -> OrderStatus:
    """
    Convert a client-supplied status string to OrderStatus.

    Raises:
        ValidationError: not one of the known statuses
    """
    try:
        return OrderStatus((value or "").strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid status. Options: {[s.value for s in OrderStatus]}"
        )


# =============================================================================
# PIPELINE
# =============================================================================

@dataclass
class CartLine:
    """One line of a cart: which menu item, how many, at what unit price."""
    menu_item_id: int
    quantity: int
    price: Decimal


def _line_view(item: OrderItem) -> dict[str, Any]:
    return {
        "name": item.menu_item.name if item.menu_item is not None else None,
        "quantity": item.quantity,
        "price": item.price,
    }


def _order_view(order: Order) -> dict[str, Any]:
    return {
        "id": order.id,
        "total_amount": order.total_amount,
        "status": OrderStatus(order.status).value,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "items": [_line_view(item) for item in order.items],
    }


class OrderPipeline:
    """Order placement, lookup and status changes."""

    def __init__(self, database: Database):
        self.db = database

    async def place(self, user_id: int, lines: Iterable[CartLine], total_amount: Decimal) -> int:
        """
        Create an order with all its lines, atomically.

        Args:
            user_id: Owner of the order
            lines: Cart lines (at least one)
            total_amount: Total shown to the customer, stored as given

        Returns:
            int: New order id

        Raises:
            ValidationError: empty cart, bad quantity/price, unknown menu item
        """
        lines = list(lines)
        self._validate_cart(lines, total_amount)

        async with self.db.session() as session:
            async with session.begin():
                menu_ids = {line.menu_item_id for line in lines}
                result = await session.execute(
                    select(MenuItem.id).where(MenuItem.id.in_(menu_ids))
                )
                missing = menu_ids - set(result.scalars().all())
                if missing:
                    raise ValidationError(f"Unknown menu item(s): {sorted(missing)}")

                order = Order(
                    user_id=user_id,
                    total_amount=Decimal(total_amount),
                    status=OrderStatus.PENDING,
                )
                session.add(order)
                await session.flush()

                for line in lines:
                    session.add(self._build_item(order.id, line))
                await session.flush()

        logger.info(
            f"Order #{order.id} placed by user #{user_id} "
            f"({len(lines)} lines, total {order.total_amount})"
        )
        return order.id

    async def get_status(self, order_id: int, user_id: int) -> dict[str, Any]:
        """
        Status of one of the caller's orders.

        Raises:
            NotFound: no such order, or it belongs to someone else
        """
        async with self.db.session() as session:
            result = await session.execute(
                select(Order.id, Order.status).where(
                    Order.id == order_id,
                    Order.user_id == user_id,
                )
            )
            row = result.first()

        if row is None:
            raise NotFound("Order not found")
        return {"id": row.id, "status": OrderStatus(row.status).value}

    async def list_for_user(self, user_id: int) -> list[dict[str, Any]]:
        """The caller's orders with their lines, newest first."""
        query = (
            select(Order)
            .where(Order.user_id == user_id)
            .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        async with self.db.session() as session:
            result = await session.execute(query)
            orders = result.scalars().all()
            return [_order_view(order) for order in orders]

    async def list_all_for_admin(self) -> list[dict[str, Any]]:
        """
        Every order with the customer's contact details and the lines
        aggregated as [{name, quantity, price}], newest first.
        """
        query = (
            select(Order)
            .options(
                joinedload(Order.user),
                selectinload(Order.items).selectinload(OrderItem.menu_item),
            )
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        async with self.db.session() as session:
            result = await session.execute(query)
            orders = result.scalars().unique().all()
            return [
                {
                    **_order_view(order),
                    "user_id": order.user_id,
                    "username": order.user.username,
                    "email": order.user.email,
                    "phone": order.user.phone,
                }
                for order in orders
            ]

    async def set_status(self, order_id: int, status: str) -> OrderStatus:
        """
        Move an order to a new status.

        Raises:
            ValidationError: unknown status or transition not allowed
            NotFound: no such order
        """
        new_status = parse_status(status)

        async with self.db.session() as session:
            async with session.begin():
                order = await session.get(Order, order_id, with_for_update=True)
                if order is None:
                    raise NotFound(f"Order #{order_id} not found")

                current = OrderStatus(order.status)
                if not can_transition(current, new_status):
                    raise ValidationError(
                        f"Cannot change status from {current.value} to {new_status.value}"
                    )
                order.status = new_status

        logger.info(f"Order #{order_id}: {current.value} → {new_status.value}")
        return new_status

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _validate_cart(lines: list[CartLine], total_amount: Decimal) -> None:
        if not lines:
            raise ValidationError("Order must contain at least one item")
        if total_amount is None or Decimal(total_amount) < 0:
            raise ValidationError("Total amount must be zero or more")
        for line in lines:
            if line.quantity is None or line.quantity < 1:
                raise ValidationError("Quantity must be at least 1")
            if line.price is None or Decimal(line.price) < 0:
                raise ValidationError("Price must be zero or more")

    @staticmethod
    def _build_item(order_id: int, line: CartLine) -> OrderItem:
        return OrderItem(
            order_id=order_id,
            menu_item_id=line.menu_item_id,
            quantity=line.quantity,
            price=Decimal(line.price),
        )
