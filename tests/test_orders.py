"""Tests for order placement, ownership and the status workflow."""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from restaurant_api.core.errors import NotFound, ValidationError
from restaurant_api.models import Order, OrderItem, OrderStatus
from restaurant_api.services import CartLine, MenuItemFields, OrderPipeline
from restaurant_api.services.orders import can_transition, parse_status


@pytest.fixture
async def two_items(services) -> list[int]:
    first = await services.menu.create(MenuItemFields(name="Burger", price=Decimal("10.00")))
    second = await services.menu.create(MenuItemFields(name="Fries", price=Decimal("5.50")))
    return [first, second]


@pytest.fixture
async def two_customers(services) -> list[int]:
    a = await services.auth.create_user("anna", "anna@example.com", "anna-password")
    b = await services.auth.create_user("ben", "ben@example.com", "ben-password")
    return [a.id, b.id]


async def count_rows(database, model) -> int:
    async with database.session() as session:
        return await session.scalar(select(func.count()).select_from(model))


# ============================================================================
# PLACEMENT
# ============================================================================


async def test_place_stores_header_and_every_line(services, database, two_items, two_customers):
    order_id = await services.orders.place(
        user_id=two_customers[0],
        lines=[
            CartLine(two_items[0], 2, Decimal("10.00")),
            CartLine(two_items[1], 1, Decimal("5.50")),
        ],
        total_amount=Decimal("25.50"),
    )

    orders = await services.orders.list_for_user(two_customers[0])
    assert [o["id"] for o in orders] == [order_id]
    assert orders[0]["status"] == "pending"
    assert orders[0]["total_amount"] == Decimal("25.50")
    assert sorted((line["name"], line["quantity"]) for line in orders[0]["items"]) == [
        ("Burger", 2),
        ("Fries", 1),
    ]
    assert await count_rows(database, OrderItem) == 2


async def test_failure_mid_placement_leaves_nothing(
    services, database, two_items, two_customers, monkeypatch
):
    original = OrderPipeline._build_item
    calls = []

    def fail_on_second_line(order_id, line):
        calls.append(line)
        if len(calls) == 2:
            raise RuntimeError("simulated storage failure")
        return original(order_id, line)

    monkeypatch.setattr(OrderPipeline, "_build_item", staticmethod(fail_on_second_line))

    with pytest.raises(RuntimeError):
        await services.orders.place(
            user_id=two_customers[0],
            lines=[
                CartLine(two_items[0], 1, Decimal("10.00")),
                CartLine(two_items[1], 1, Decimal("5.50")),
            ],
            total_amount=Decimal("15.50"),
        )

    assert await count_rows(database, Order) == 0
    assert await count_rows(database, OrderItem) == 0


async def test_empty_cart_is_rejected(services, two_customers):
    with pytest.raises(ValidationError):
        await services.orders.place(two_customers[0], [], Decimal("0"))


async def test_unknown_menu_item_is_rejected(services, database, two_items, two_customers):
    with pytest.raises(ValidationError):
        await services.orders.place(
            two_customers[0],
            [CartLine(9999, 1, Decimal("1.00"))],
            Decimal("1.00"),
        )
    assert await count_rows(database, Order) == 0


@pytest.mark.parametrize(
    "line",
    [
        CartLine(1, 0, Decimal("1.00")),
        CartLine(1, 1, Decimal("-1.00")),
    ],
)
async def test_bad_quantity_or_price_is_rejected(services, two_items, two_customers, line):
    with pytest.raises(ValidationError):
        await services.orders.place(two_customers[0], [line], Decimal("1.00"))


async def test_deleted_menu_item_keeps_order_line(services, two_items, two_customers):
    await services.orders.place(
        two_customers[0],
        [CartLine(two_items[0], 1, Decimal("10.00"))],
        Decimal("10.00"),
    )
    await services.menu.delete(two_items[0])

    orders = await services.orders.list_all_for_admin()
    assert orders[0]["items"] == [{"name": None, "quantity": 1, "price": Decimal("10.00")}]


# ============================================================================
# OWNERSHIP
# ============================================================================


async def test_other_users_order_looks_like_missing_order(services, two_items, two_customers):
    order_id = await services.orders.place(
        two_customers[0],
        [CartLine(two_items[0], 1, Decimal("10.00"))],
        Decimal("10.00"),
    )

    assert (await services.orders.get_status(order_id, two_customers[0]))["status"] == "pending"

    with pytest.raises(NotFound) as foreign:
        await services.orders.get_status(order_id, two_customers[1])
    with pytest.raises(NotFound) as missing:
        await services.orders.get_status(order_id + 100, two_customers[1])

    assert foreign.value.message == missing.value.message


async def test_list_for_user_only_returns_own_orders(services, two_items, two_customers):
    line = [CartLine(two_items[0], 1, Decimal("10.00"))]
    mine = await services.orders.place(two_customers[0], line, Decimal("10.00"))
    await services.orders.place(two_customers[1], line, Decimal("10.00"))

    orders = await services.orders.list_for_user(two_customers[0])
    assert [o["id"] for o in orders] == [mine]


# ============================================================================
# STATUS WORKFLOW
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "current,new,allowed",
    [
        (OrderStatus.PENDING, OrderStatus.CONFIRMED, True),
        (OrderStatus.PENDING, OrderStatus.PREPARING, True),
        (OrderStatus.CONFIRMED, OrderStatus.PENDING, False),
        (OrderStatus.PREPARING, OrderStatus.CANCELLED, True),
        (OrderStatus.COMPLETED, OrderStatus.CANCELLED, False),
        (OrderStatus.CANCELLED, OrderStatus.PENDING, False),
        (OrderStatus.COMPLETED, OrderStatus.COMPLETED, True),
    ],
)
def test_can_transition(current, new, allowed):
    assert can_transition(current, new) is allowed


@pytest.mark.unit
def test_parse_status_is_case_insensitive():
    assert parse_status(" Confirmed ") == OrderStatus.CONFIRMED
    with pytest.raises(ValidationError):
        parse_status("shipped")


async def test_set_status_moves_forward(services, two_items, two_customers):
    order_id = await services.orders.place(
        two_customers[0],
        [CartLine(two_items[0], 1, Decimal("10.00"))],
        Decimal("10.00"),
    )

    assert await services.orders.set_status(order_id, "confirmed") == OrderStatus.CONFIRMED
    assert (await services.orders.get_status(order_id, two_customers[0]))["status"] == "confirmed"

    with pytest.raises(ValidationError):
        await services.orders.set_status(order_id, "pending")
    assert (await services.orders.get_status(order_id, two_customers[0]))["status"] == "confirmed"


async def test_set_status_unknown_value_changes_nothing(services, two_items, two_customers):
    order_id = await services.orders.place(
        two_customers[0],
        [CartLine(two_items[0], 1, Decimal("10.00"))],
        Decimal("10.00"),
    )

    with pytest.raises(ValidationError):
        await services.orders.set_status(order_id, "delivered")
    assert (await services.orders.get_status(order_id, two_customers[0]))["status"] == "pending"


async def test_set_status_missing_order(services):
    with pytest.raises(NotFound):
        await services.orders.set_status(12345, "confirmed")
