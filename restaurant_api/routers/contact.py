"""
Contact Router - Contact Form and Admin Inbox

Endpoints:
- POST /api/contact - Submit a message (public)
- GET /api/admin/messages - List messages, newest first (admin)
- DELETE /api/admin/messages/{message_id} - Delete a message (admin, idempotent)
"""

import logging

from fastapi import APIRouter

from restaurant_api.dependencies import AdminUser, ServicesDep
from restaurant_api.schemas import (
    ContactCreate,
    ContactListResponse,
    ContactMessageResponse,
    ErrorResponse,
    SuccessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Contact"])


@router.post(
    "/api/contact",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Submit a contact message",
)
async def submit_message(payload: ContactCreate, services: ServicesDep) -> SuccessResponse:
    await services.contact.submit(
        name=payload.name,
        email=payload.email,
        message=payload.message,
        phone=payload.phone,
    )
    return SuccessResponse()


@router.get(
    "/api/admin/messages",
    response_model=ContactListResponse,
    summary="List contact messages (Admin)",
)
async def list_messages(admin: AdminUser, services: ServicesDep) -> ContactListResponse:
    messages = await services.contact.list_messages()
    return ContactListResponse(
        messages=[ContactMessageResponse.model_validate(m) for m in messages]
    )


@router.delete(
    "/api/admin/messages/{message_id}",
    response_model=SuccessResponse,
    summary="Delete a contact message (Admin)",
)
async def delete_message(message_id: int, admin: AdminUser, services: ServicesDep) -> SuccessResponse:
    await services.contact.delete(message_id)
    return SuccessResponse()
