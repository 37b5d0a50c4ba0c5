"""
Pydantic Schemas for Request/Response Validation

Every response carries a boolean ``success`` field; failures add ``message``.
Field names on the wire (orderId, itemId, total_amount, full_name) match what
the restaurant website already sends and reads.

Author: Khalil_Bannouri
Version: 1.0.0
"""

from pydantic import BaseModel, ConfigDict, Field, EmailStr, PlainSerializer, field_validator
from typing import Annotated, Optional, List, Any
from datetime import datetime
from decimal import Decimal

from restaurant_api.models import UserRole


# Money travels as Decimal internally and as a JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# =============================================================================
# AUTH SCHEMAS
# =============================================================================

class RegisterRequest(BaseModel):
    """Request schema for creating a customer account."""
    username: str = Field(..., min_length=3, max_length=50, examples=["alice"])
    email: EmailStr = Field(..., examples=["alice@example.com"])
    # bcrypt only looks at the first 72 bytes
    password: str = Field(..., min_length=6, max_length=72)
    full_name: Optional[str] = Field(None, max_length=100, examples=["Alice Smith"])
    phone: Optional[str] = Field(None, max_length=20, examples=["555-123-4567"])
    address: Optional[str] = Field(None, max_length=500)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Username must have at least 3 characters")
        return v


class LoginRequest(BaseModel):
    """``username`` accepts either the username or the email address."""
    username: str = Field(..., min_length=1, max_length=255, examples=["alice"])
    password: str = Field(..., min_length=1, max_length=72)


class UserResponse(BaseModel):
    """Account record as returned to clients (never includes the hash)."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None


class IdentityResponse(BaseModel):
    """Identity decoded from a bearer token."""
    id: int
    username: str
    email: str
    role: str


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: Optional[UserResponse] = None


class MeResponse(BaseModel):
    success: bool = True
    user: IdentityResponse


# =============================================================================
# MENU SCHEMAS
# =============================================================================

class MenuItemResponse(BaseModel):
    """Response schema for a single menu item."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    price: Money
    category: Optional[str] = None
    image: Optional[str] = None
    created_at: Optional[datetime] = None


class MenuListResponse(BaseModel):
    success: bool = True
    items: List[MenuItemResponse]


class MenuItemCreateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    item_id: int = Field(..., serialization_alias="itemId")


# =============================================================================
# ORDER SCHEMAS
# =============================================================================

class OrderItemCreate(BaseModel):
    """Single cart line: menu item id, quantity and unit price seen by the client."""
    id: int = Field(..., ge=1, examples=[3])
    quantity: int = Field(..., ge=1, le=99, examples=[2])
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, examples=[12.75])


class OrderCreate(BaseModel):
    """Request schema for placing an order."""
    items: List[OrderItemCreate] = Field(..., min_length=1)
    total_amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, examples=[25.50])


class OrderCreateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    order_id: int = Field(..., serialization_alias="orderId")


class OrderStatusView(BaseModel):
    id: int
    status: str


class OrderStatusResponse(BaseModel):
    success: bool = True
    order: OrderStatusView


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=30, examples=["confirmed"])


class OrderLineResponse(BaseModel):
    """Aggregated order line. ``name`` is null once the menu item is deleted."""
    name: Optional[str] = None
    quantity: int
    price: Money


class OrderResponse(BaseModel):
    """An order as its owner sees it."""
    id: int
    total_amount: Money
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderLineResponse] = Field(default_factory=list)


class AdminOrderResponse(OrderResponse):
    """An order with the customer's contact details."""
    user_id: int
    username: str
    email: str
    phone: Optional[str] = None


class OrderListResponse(BaseModel):
    success: bool = True
    orders: List[OrderResponse]


class AdminOrderListResponse(BaseModel):
    success: bool = True
    orders: List[AdminOrderResponse]


# =============================================================================
# CONTACT SCHEMAS
# =============================================================================

class ContactCreate(BaseModel):
    """
    Contact form payload.

    Required fields are checked by the inbox itself so a blank string is
    rejected the same way as a missing one.
    """
    name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    message: Optional[str] = Field(None, max_length=5000)


class ContactMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    created_at: Optional[datetime] = None


class ContactListResponse(BaseModel):
    success: bool = True
    messages: List[ContactMessageResponse]


# =============================================================================
# GENERIC RESPONSES
# =============================================================================

class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    message: str
    errors: Optional[List[Any]] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    version: str
    timestamp: datetime
