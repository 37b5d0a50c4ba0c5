"""
Auth Router - Registration and Login

Endpoints:
- POST /api/auth/register - Create a customer account, returns a token
- POST /api/auth/login - Exchange username/email + password for a token
- GET /api/auth/me - Identity carried by the presented token
"""

import logging

from fastapi import APIRouter

from restaurant_api.dependencies import CurrentUser, ServicesDep
from restaurant_api.schemas import (
    AuthResponse,
    ErrorResponse,
    IdentityResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
    summary="Register a customer account",
)
async def register(payload: RegisterRequest, services: ServicesDep) -> AuthResponse:
    token = await services.auth.register(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        phone=payload.phone,
        address=payload.address,
    )
    return AuthResponse(token=token)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Log in with username or email",
)
async def login(payload: LoginRequest, services: ServicesDep) -> AuthResponse:
    token, user = await services.auth.login(payload.username, payload.password)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="Current identity",
)
async def me(user: CurrentUser) -> MeResponse:
    return MeResponse(
        user=IdentityResponse(
            id=user.id,
            username=user.username,
            email=user.email,
            role=user.role.value,
        )
    )
