"""
Menu Catalog Service

CRUD over menu items. Listing is public; every write is reached only
through admin routes. Images go through the image store, the row keeps
the public reference.

Image cleanup is best-effort everywhere: a file that cannot be removed is
logged and left behind, it never blocks the row operation. A file that
another menu item still references is kept.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from starlette.concurrency import run_in_threadpool

from restaurant_api.core.errors import NotFound, ValidationError
from restaurant_api.database import Database
from restaurant_api.models import MenuItem
from restaurant_api.services.storage import BaseImageStore, ImageUpload

logger = logging.getLogger(__name__)

# Sentinel for "caller did not mention the image at all"
KEEP_IMAGE = object()


@dataclass
class MenuItemFields:
    """Editable menu item attributes."""
    name: str
    price: Decimal
    description: Optional[str] = None
    category: Optional[str] = None

    def cleaned(self) -> "MenuItemFields":
        name = (self.name or "").strip()
        if not name:
            raise ValidationError("Name is required")
        if self.price is None or Decimal(self.price) < 0:
            raise ValidationError("Price must be zero or more")
        return MenuItemFields(
            name=name,
            price=Decimal(self.price),
            description=(self.description or "").strip() or None,
            category=(self.category or "").strip() or None,
        )


class MenuCatalog:
    """Menu items and their images."""

    def __init__(self, database: Database, image_store: BaseImageStore):
        self.db = database
        self.images = image_store

    async def list_items(self, limit: Optional[int] = None) -> list[MenuItem]:
        """Menu items, newest first, optionally capped at ``limit``."""
        query = select(MenuItem).order_by(MenuItem.id.desc())
        if limit is not None:
            query = query.limit(limit)

        async with self.db.session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def get(self, item_id: int) -> MenuItem:
        async with self.db.session() as session:
            item = await session.get(MenuItem, item_id)
        if item is None:
            raise NotFound(f"Menu item #{item_id} not found")
        return item

    async def create(self, fields: MenuItemFields, image: Optional[ImageUpload] = None) -> int:
        """
        Add a menu item.

        Args:
            fields: Name, price, description, category
            image: Optional upload, validated before anything is written

        Returns:
            int: New menu item id
        """
        fields = fields.cleaned()
        reference = await self._store(image)

        try:
            async with self.db.session() as session:
                item = MenuItem(
                    name=fields.name,
                    description=fields.description,
                    price=fields.price,
                    category=fields.category,
                    image=reference,
                )
                session.add(item)
                await session.commit()
        except Exception:
            await self._discard(reference)
            raise

        logger.info(f"Menu item #{item.id} created ({item.name})")
        return item.id

    async def update(
        self,
        item_id: int,
        fields: MenuItemFields,
        image: Optional[ImageUpload] = None,
        image_reference=KEEP_IMAGE,
    ) -> None:
        """
        Replace a menu item's attributes.

        Args:
            item_id: Item to update
            fields: New attribute values
            image: New upload; takes precedence over ``image_reference``
            image_reference: Reference to keep when no file is uploaded.
                KEEP_IMAGE leaves the current image, "" or None clears it.
        """
        fields = fields.cleaned()
        new_reference = await self._store(image)

        try:
            async with self.db.session() as session:
                item = await session.get(MenuItem, item_id)
                if item is None:
                    raise NotFound(f"Menu item #{item_id} not found")

                old_reference = item.image
                if new_reference is not None:
                    item.image = new_reference
                elif image_reference is not KEEP_IMAGE:
                    item.image = image_reference or None

                item.name = fields.name
                item.description = fields.description
                item.price = fields.price
                item.category = fields.category
                await session.commit()
        except Exception:
            await self._discard(new_reference)
            raise

        if old_reference and old_reference != item.image:
            await self._release(old_reference, item_id)

        logger.info(f"Menu item #{item_id} updated")

    async def delete(self, item_id: int) -> None:
        """Remove a menu item, deleting its image file first (best-effort)."""
        async with self.db.session() as session:
            item = await session.get(MenuItem, item_id)
            if item is None:
                raise NotFound(f"Menu item #{item_id} not found")

            await self._release(item.image, item_id)

            await session.delete(item)
            await session.commit()

        logger.info(f"Menu item #{item_id} deleted")

    # =========================================================================
    # IMAGE HELPERS
    # =========================================================================

    async def _store(self, image: Optional[ImageUpload]) -> Optional[str]:
        if image is None:
            return None
        return await run_in_threadpool(self.images.save, image)

    async def _release(self, reference: Optional[str], item_id: int) -> None:
        """Discard ``reference`` unless a menu item other than ``item_id`` still uses it."""
        if not reference:
            return

        async with self.db.session() as session:
            result = await session.execute(
                select(MenuItem.id)
                .where(MenuItem.image == reference, MenuItem.id != item_id)
                .limit(1)
            )
            shared = result.first() is not None

        if shared:
            logger.info(f"Image {reference} still used by another menu item, kept")
            return
        await self._discard(reference)

    async def _discard(self, reference: Optional[str]) -> None:
        if not reference:
            return
        try:
            await run_in_threadpool(self.images.delete, reference)
        except Exception as e:
            logger.warning(f"Image cleanup failed for {reference}: {e}")
