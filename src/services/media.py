"""Media store for uploaded post images and avatars."""

import logging
import secrets
import time
from enum import Enum
from pathlib import Path
from urllib.parse import urlparse

from fastapi import UploadFile

from src.config import Settings, get_settings
from src.services.errors import InvalidInputError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp"}

EXTENSIONS_BY_TYPE = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


class MediaKind(str, Enum):
    """Upload sub-directories."""

    POSTS = "posts"
    AVATARS = "avatars"


def get_uploads_root(settings: Settings | None = None) -> Path:
    """Root directory of stored uploads (served at /uploads)."""
    settings = settings or get_settings()
    return Path(settings.uploads_dir)


class MediaStore:
    """Stores uploaded images on disk and maps them to public URLs."""

    def __init__(self, root: Path | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.root = root or get_uploads_root(self.settings)

    def ensure_dirs(self) -> None:
        for kind in MediaKind:
            (self.root / kind.value).mkdir(parents=True, exist_ok=True)

    def max_bytes(self, kind: MediaKind) -> int:
        if kind == MediaKind.AVATARS:
            return self.settings.avatar_max_bytes
        return self.settings.post_image_max_bytes

    async def save(self, upload: UploadFile, kind: MediaKind) -> str:
        """Validate and store an uploaded image.

        Returns:
            Public URL of the stored file.
        """
        if upload.content_type not in ALLOWED_IMAGE_TYPES:
            raise InvalidInputError(
                f"Invalid file type. Allowed types: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}"
            )

        content = await upload.read()
        limit = self.max_bytes(kind)
        if len(content) > limit:
            raise InvalidInputError(f"File too large. Maximum size is {limit // (1024 * 1024)}MB.")

        filename = self._make_filename(upload)
        directory = self.root / kind.value
        directory.mkdir(parents=True, exist_ok=True)
        (directory / filename).write_bytes(content)

        logger.info(f"Stored {kind.value} upload {filename} ({len(content)} bytes)")
        return self.url_for(kind, filename)

    def url_for(self, kind: MediaKind, filename: str) -> str:
        return f"{self.settings.uploads_base_url}/{kind.value}/{filename}"

    def is_internal(self, url: str | None) -> bool:
        """Check if a URL points at media hosted by this service."""
        if not url:
            return False
        return url.startswith(f"{self.settings.uploads_base_url}/")

    def path_for(self, url: str, kind: MediaKind) -> Path:
        """Derive the on-disk path from the URL's trailing path segment."""
        filename = Path(urlparse(url).path).name
        if not filename:
            raise ValueError(f"Cannot derive a file name from {url!r}")
        return self.root / kind.value / filename

    def delete(self, url: str, kind: MediaKind) -> bool:
        """Delete a stored file.

        Returns:
            True if a file was removed, False if it was already gone.

        Raises:
            OSError: if the file exists but cannot be removed.
            ValueError: if the URL has no trailing file name.
        """
        path = self.path_for(url, kind)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Deleted {kind.value} file {path.name}")
        return True

    @staticmethod
    def _make_filename(upload: UploadFile) -> str:
        ext = Path(upload.filename or "").suffix.lower()
        if not ext:
            ext = EXTENSIONS_BY_TYPE.get(upload.content_type or "", "")
        return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{ext}"
