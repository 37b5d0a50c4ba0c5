"""
Image Store Abstract Base Class

Defines the interface for the content store holding menu images.
Menu rows keep only the public reference returned by ``save``; the bytes
live wherever the implementation puts them.

Validation is shared by every implementation: an upload must carry an
allowed extension AND an allowed content type (either alone is trivially
spoofed) and must not exceed the configured size.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from restaurant_api.core.errors import ValidationError


@dataclass
class ImageUpload:
    """
    An uploaded file as received from the client.

    Attributes:
        filename: Original client-side file name
        content_type: Declared MIME type
        data: File contents
    """
    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def extension(self) -> str:
        """Lowercase extension including the dot ('' when absent)."""
        return os.path.splitext(self.filename or "")[1].lower()

    @property
    def size(self) -> int:
        return len(self.data)


class BaseImageStore(ABC):
    """Abstract base class for menu image storage."""

    def __init__(
        self,
        allowed_extensions: Iterable[str],
        allowed_content_types: Iterable[str],
        max_bytes: int,
    ):
        self.allowed_extensions = {e.lower() for e in allowed_extensions}
        self.allowed_content_types = {c.lower() for c in allowed_content_types}
        self.max_bytes = max_bytes

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the storage backend name."""
        pass

    def validate(self, upload: ImageUpload) -> None:
        """
        Reject anything that is not an allowed image.

        Raises:
            ValidationError: wrong extension, wrong content type, empty or too large
        """
        content_type = (upload.content_type or "").split(";")[0].strip().lower()

        if upload.extension not in self.allowed_extensions:
            raise ValidationError("Images only (jpeg, jpg, png)")
        if content_type not in self.allowed_content_types:
            raise ValidationError("Images only (jpeg, jpg, png)")
        if upload.size == 0:
            raise ValidationError("Uploaded image is empty")
        if upload.size > self.max_bytes:
            raise ValidationError(
                f"Image too large (max {self.max_bytes // (1024 * 1024)} MB)"
            )

    @abstractmethod
    def save(self, upload: ImageUpload) -> str:
        """
        Validate and persist an upload.

        Returns:
            str: Public reference to store on the menu item
        """
        pass

    @abstractmethod
    def delete(self, reference: Optional[str]) -> bool:
        """
        Best-effort removal of a stored image.

        Never raises: a missing file or an OS error is logged and
        reported as False so the surrounding row operation continues.
        """
        pass
