"""
Image Store Factory

Builds the content store for menu images from configuration.

Usage:
    from restaurant_api.services.storage import build_image_store

    store = build_image_store(settings)
    reference = store.save(upload)   # "/uploads/1712345678901-ab12cd34.png"
"""

import logging

from restaurant_api.core.config import Settings
from restaurant_api.services.storage.base import BaseImageStore, ImageUpload
from restaurant_api.services.storage.local import LocalImageStore

logger = logging.getLogger(__name__)


def build_image_store(settings: Settings) -> BaseImageStore:
    """
    Create the configured image store.

    Returns:
        BaseImageStore: A LocalImageStore writing to UPLOAD_DIRECTORY
    """
    store = LocalImageStore(
        directory=settings.upload_directory,
        url_prefix=settings.upload_url_prefix,
        allowed_extensions=settings.allowed_image_extensions_list,
        allowed_content_types=settings.allowed_image_content_types_list,
        max_bytes=settings.max_upload_bytes,
    )
    store.ensure_directory()
    logger.debug(f"Image store: {store.provider_name} ({settings.upload_directory})")
    return store


__all__ = [
    "build_image_store",
    "BaseImageStore",
    "ImageUpload",
    "LocalImageStore",
]
