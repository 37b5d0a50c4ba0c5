"""
                        Services Module

Business logic behind the API routes. Every service receives the shared
Database handle (and whatever else it needs) at construction time.

Services:
    - auth: registration, login, bearer tokens, role checks
    - menu: menu catalog with image uploads
    - orders: atomic order placement and status workflow
    - contact: contact form inbox
    - order_export: Excel download of the order list
    - storage: content store for menu images
"""

from dataclasses import dataclass

from restaurant_api.core.config import Settings
from restaurant_api.database import Database
from restaurant_api.services.auth import AuthService, Identity, require_role
from restaurant_api.services.contact import ContactInbox
from restaurant_api.services.menu import MenuCatalog, MenuItemFields
from restaurant_api.services.order_export import OrderExporter
from restaurant_api.services.orders import CartLine, OrderPipeline
from restaurant_api.services.storage import BaseImageStore, build_image_store


@dataclass
class Services:
    """Everything the routes need, built once per application."""
    auth: AuthService
    menu: MenuCatalog
    orders: OrderPipeline
    contact: ContactInbox
    images: BaseImageStore

    @classmethod
    def build(cls, database: Database, settings: Settings) -> "Services":
        images = build_image_store(settings)
        return cls(
            auth=AuthService(database, settings),
            menu=MenuCatalog(database, images),
            orders=OrderPipeline(database),
            contact=ContactInbox(database),
            images=images,
        )


__all__ = [
    "Services",
    "AuthService",
    "Identity",
    "require_role",
    "MenuCatalog",
    "MenuItemFields",
    "OrderPipeline",
    "CartLine",
    "ContactInbox",
    "OrderExporter",
    "BaseImageStore",
    "build_image_store",
]
