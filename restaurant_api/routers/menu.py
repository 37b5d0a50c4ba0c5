"""
Menu Router - Public Menu and Admin Catalog Management

Endpoints:
- GET /api/menu - List menu items, newest first (public, optional ?limit=)
- GET /api/admin/menu - List every menu item (admin)
- POST /api/admin/menu - Create an item, multipart with optional "image" file (admin)
- PUT /api/admin/menu/{item_id} - Replace an item, multipart (admin)
- DELETE /api/admin/menu/{item_id} - Delete an item and its image (admin)

Image handling on PUT: an uploaded "image" file replaces the current one;
a plain "image" text field sets the reference directly ("" clears it);
no "image" field at all keeps the current image.
"""

import logging
from decimal import Decimal
from typing import Annotated, Optional

from fastapi import APIRouter, Form, Query, Request
from starlette.datastructures import UploadFile

from restaurant_api.dependencies import AdminUser, ServicesDep
from restaurant_api.schemas import (
    ErrorResponse,
    MenuItemCreateResponse,
    MenuItemResponse,
    MenuListResponse,
    SuccessResponse,
)
from restaurant_api.services import MenuItemFields
from restaurant_api.services.menu import KEEP_IMAGE
from restaurant_api.services.storage import ImageUpload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Menu"])


async def _image_from_form(request: Request, max_bytes: int) -> tuple[Optional[ImageUpload], object]:
    """
    Pull the "image" part out of the multipart form.

    Returns:
        (upload, reference): the uploaded file if one was sent, otherwise
        the text value of the field (KEEP_IMAGE when the field is absent)
    """
    form = await request.form()
    value = form.get("image")

    if isinstance(value, UploadFile):
        # Browsers send an empty part when no file was picked
        if not value.filename:
            return None, KEEP_IMAGE
        # One byte over the limit is enough for the store to reject it
        data = await value.read(max_bytes + 1)
        return ImageUpload(filename=value.filename, content_type=value.content_type, data=data), KEEP_IMAGE

    if value is None:
        return None, KEEP_IMAGE
    return None, value


@router.get(
    "/api/menu",
    response_model=MenuListResponse,
    summary="List menu items",
)
async def list_menu(
    services: ServicesDep,
    limit: Optional[int] = Query(None, ge=1, le=100),
) -> MenuListResponse:
    items = await services.menu.list_items(limit=limit)
    return MenuListResponse(items=[MenuItemResponse.model_validate(i) for i in items])


@router.get(
    "/api/admin/menu",
    response_model=MenuListResponse,
    summary="List menu items (Admin)",
)
async def admin_list_menu(admin: AdminUser, services: ServicesDep) -> MenuListResponse:
    items = await services.menu.list_items()
    return MenuListResponse(items=[MenuItemResponse.model_validate(i) for i in items])


@router.post(
    "/api/admin/menu",
    response_model=MenuItemCreateResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Create menu item (Admin)",
)
async def create_menu_item(
    request: Request,
    admin: AdminUser,
    services: ServicesDep,
    name: Annotated[str, Form(min_length=1, max_length=100)],
    price: Annotated[Decimal, Form(ge=0, max_digits=10, decimal_places=2)],
    description: Annotated[Optional[str], Form()] = None,
    category: Annotated[Optional[str], Form(max_length=50)] = None,
) -> MenuItemCreateResponse:
    upload, _ = await _image_from_form(request, services.images.max_bytes)

    item_id = await services.menu.create(
        MenuItemFields(name=name, price=price, description=description, category=category),
        image=upload,
    )
    logger.info(f"Admin '{admin.username}' created menu item #{item_id}")
    return MenuItemCreateResponse(item_id=item_id)


@router.put(
    "/api/admin/menu/{item_id}",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update menu item (Admin)",
)
async def update_menu_item(
    item_id: int,
    request: Request,
    admin: AdminUser,
    services: ServicesDep,
    name: Annotated[str, Form(min_length=1, max_length=100)],
    price: Annotated[Decimal, Form(ge=0, max_digits=10, decimal_places=2)],
    description: Annotated[Optional[str], Form()] = None,
    category: Annotated[Optional[str], Form(max_length=50)] = None,
) -> SuccessResponse:
    upload, reference = await _image_from_form(request, services.images.max_bytes)

    await services.menu.update(
        item_id,
        MenuItemFields(name=name, price=price, description=description, category=category),
        image=upload,
        image_reference=reference,
    )
    logger.info(f"Admin '{admin.username}' updated menu item #{item_id}")
    return SuccessResponse()


@router.delete(
    "/api/admin/menu/{item_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete menu item (Admin)",
)
async def delete_menu_item(item_id: int, admin: AdminUser, services: ServicesDep) -> SuccessResponse:
    await services.menu.delete(item_id)
    logger.info(f"Admin '{admin.username}' deleted menu item #{item_id}")
    return SuccessResponse()
