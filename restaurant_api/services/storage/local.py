"""
Local Filesystem Image Store

Writes menu images into the upload directory that the API serves back as
static files. File names are generated server-side (millisecond timestamp
plus a random suffix); the client's file name only contributes its
extension.
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Iterable, Optional

from restaurant_api.services.storage.base import BaseImageStore, ImageUpload

logger = logging.getLogger(__name__)


class LocalImageStore(BaseImageStore):
    """Image store backed by a local directory."""

    def __init__(
        self,
        directory: str,
        url_prefix: str,
        allowed_extensions: Iterable[str],
        allowed_content_types: Iterable[str],
        max_bytes: int,
    ):
        super().__init__(allowed_extensions, allowed_content_types, max_bytes)
        self.directory = Path(directory)
        self.url_prefix = "/" + url_prefix.strip("/")

    @property
    def provider_name(self) -> str:
        return "local"

    def ensure_directory(self) -> None:
        """Create the upload directory if needed."""
        if not self.directory.exists():
            self.directory.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created upload directory: {self.directory}")

    def path_for(self, reference: Optional[str]) -> Optional[Path]:
        """Map a public reference back to a file inside the upload directory."""
        if not reference or not reference.startswith(self.url_prefix + "/"):
            return None
        # Only the final component counts, so "../" in a stored value cannot escape
        name = Path(reference[len(self.url_prefix) + 1:]).name
        if not name:
            return None
        return self.directory / name

    def save(self, upload: ImageUpload) -> str:
        self.validate(upload)
        self.ensure_directory()

        filename = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{upload.extension}"
        (self.directory / filename).write_bytes(upload.data)

        logger.info(f"Stored image {filename} ({upload.size} bytes)")
        return f"{self.url_prefix}/{filename}"

    def delete(self, reference: Optional[str]) -> bool:
        path = self.path_for(reference)
        if path is None:
            return False

        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"Image already missing, nothing to delete: {path}")
            return False
        except OSError as e:
            logger.warning(f"Could not delete image {path}: {e}")
            return False

        logger.info(f"Deleted image {path.name}")
        return True
