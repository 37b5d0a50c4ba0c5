"""
Orders Router - Order Placement and Management

Endpoints:
- POST /api/orders - Place an order (customer)
- GET /api/orders - List my orders (customer)
- GET /api/orders/{order_id} - Poll the status of one of my orders (owner)
- GET /api/admin/orders - List all orders with customer details and items (admin)
- GET /api/admin/orders/export - Download all orders as .xlsx (admin)
- PUT /api/admin/orders/{order_id}/status - Change an order's status (admin)
"""

import logging

from fastapi import APIRouter
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from restaurant_api.dependencies import AdminUser, CurrentUser, ServicesDep
from restaurant_api.schemas import (
    AdminOrderListResponse,
    ErrorResponse,
    OrderCreate,
    OrderCreateResponse,
    OrderListResponse,
    OrderStatusResponse,
    OrderStatusUpdate,
    OrderStatusView,
    SuccessResponse,
)
from restaurant_api.services import CartLine, OrderExporter
from restaurant_api.services.order_export import XLSX_MEDIA_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Orders"])


# ============================================================================
# Customer Endpoints
# ============================================================================


@router.post(
    "/api/orders",
    response_model=OrderCreateResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Place an order",
)
async def place_order(
    payload: OrderCreate,
    user: CurrentUser,
    services: ServicesDep,
) -> OrderCreateResponse:
    """Create the order and all of its lines in one transaction."""
    order_id = await services.orders.place(
        user_id=user.id,
        lines=[
            CartLine(menu_item_id=item.id, quantity=item.quantity, price=item.price)
            for item in payload.items
        ],
        total_amount=payload.total_amount,
    )
    return OrderCreateResponse(order_id=order_id)


@router.get(
    "/api/orders",
    response_model=OrderListResponse,
    summary="List my orders",
)
async def list_my_orders(user: CurrentUser, services: ServicesDep) -> OrderListResponse:
    orders = await services.orders.list_for_user(user.id)
    return OrderListResponse(orders=orders)


@router.get(
    "/api/orders/{order_id}",
    response_model=OrderStatusResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get order status",
)
async def get_order_status(
    order_id: int,
    user: CurrentUser,
    services: ServicesDep,
) -> OrderStatusResponse:
    """Other customers' orders are reported as not found."""
    order = await services.orders.get_status(order_id, user.id)
    return OrderStatusResponse(order=OrderStatusView(**order))


# ============================================================================
# Admin Endpoints
# ============================================================================


@router.get(
    "/api/admin/orders",
    response_model=AdminOrderListResponse,
    summary="List all orders (Admin)",
)
async def list_all_orders(admin: AdminUser, services: ServicesDep) -> AdminOrderListResponse:
    orders = await services.orders.list_all_for_admin()
    return AdminOrderListResponse(orders=orders)


@router.get(
    "/api/admin/orders/export",
    response_class=Response,
    responses={200: {"content": {XLSX_MEDIA_TYPE: {}}}},
    summary="Export all orders to Excel (Admin)",
)
async def export_orders(admin: AdminUser, services: ServicesDep) -> Response:
    orders = await services.orders.list_all_for_admin()
    content = await run_in_threadpool(OrderExporter.to_xlsx, orders)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{OrderExporter.filename()}"'},
    )


@router.put(
    "/api/admin/orders/{order_id}/status",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update order status (Admin)",
)
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    admin: AdminUser,
    services: ServicesDep,
) -> SuccessResponse:
    new_status = await services.orders.set_status(order_id, payload.status)
    logger.info(f"Admin '{admin.username}' set order #{order_id} to {new_status.value}")
    return SuccessResponse()
