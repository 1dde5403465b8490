"""
Preview image storage - accepts, stores and removes template preview images
"""

import logging
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import List, Optional

from PIL import Image, UnidentifiedImageError

from campaign_ledger.core.config import settings
from campaign_ledger.core.exceptions import StorageRejected

logger = logging.getLogger(__name__)


@dataclass
class ImageUpload:
    """An uploaded file part, already read into memory"""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class ImageStorage(ABC):
    """Storage collaborator for preview images"""

    @abstractmethod
    def check(self, upload: ImageUpload) -> None:
        """Raise StorageRejected if the upload would not be accepted"""

    @abstractmethod
    def save(self, upload: ImageUpload) -> str:
        """Persist the upload and return its public URL"""

    @abstractmethod
    def delete(self, url: str) -> None:
        """Remove a previously saved image; unknown URLs are ignored"""


class LocalImageStorage(ImageStorage):
    """Stores images on the local filesystem and serves them from MEDIA_URL"""

    EXTENSIONS = {
        "image/jpeg": ".jpg",
        "image/png": ".png",
        "image/webp": ".webp",
        "image/gif": ".gif",
    }

    def __init__(
        self,
        root: Optional[str] = None,
        base_url: Optional[str] = None,
        max_size_bytes: Optional[int] = None,
        allowed_content_types: Optional[List[str]] = None,
    ):
        self.root = Path(root or settings.MEDIA_ROOT)
        self.base_url = (base_url or settings.MEDIA_URL).rstrip("/")
        self.max_size_bytes = max_size_bytes or settings.MAX_IMAGE_SIZE_MB * 1024 * 1024
        self.allowed_content_types = allowed_content_types or settings.ALLOWED_IMAGE_CONTENT_TYPES

    def check(self, upload: ImageUpload) -> None:
        if upload.content_type not in self.allowed_content_types:
            raise StorageRejected(
                f"Unsupported image type '{upload.content_type}' for {upload.filename}"
            )
        if upload.size == 0:
            raise StorageRejected(f"Image {upload.filename} is empty")
        if upload.size > self.max_size_bytes:
            raise StorageRejected(
                f"Image {upload.filename} is larger than {self.max_size_bytes} bytes"
            )
        try:
            with Image.open(BytesIO(upload.data)) as image:
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise StorageRejected(f"File {upload.filename} is not a valid image: {e}")

    def save(self, upload: ImageUpload) -> str:
        self.check(upload)

        extension = self.EXTENSIONS.get(upload.content_type, "")
        name = f"{uuid.uuid4().hex}{extension}"
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / name
        with open(path, "wb") as f:
            f.write(upload.data)

        logger.info(f"Stored preview image {upload.filename} as {name} ({upload.size} bytes)")
        return f"{self.base_url}/{name}"

    def delete(self, url: str) -> None:
        prefix = f"{self.base_url}/"
        if not url or not url.startswith(prefix):
            return
        name = os.path.basename(url[len(prefix):])
        path = self.root / name
        if path.exists():
            path.unlink()
            logger.info(f"Removed preview image {name}")


_storage: Optional[ImageStorage] = None


def get_image_storage() -> ImageStorage:
    """FastAPI dependency returning the process-wide storage backend"""
    global _storage
    if _storage is None:
        _storage = LocalImageStorage()
    return _storage
