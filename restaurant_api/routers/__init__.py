"""
API routers.

    - auth:    /api/auth/*
    - menu:    /api/menu, /api/admin/menu
    - orders:  /api/orders, /api/admin/orders
    - contact: /api/contact, /api/admin/messages
"""

from restaurant_api.routers import auth, contact, menu, orders

__all__ = ["auth", "contact", "menu", "orders"]
