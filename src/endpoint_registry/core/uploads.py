"""Icon storage on the local filesystem, laid out like an object-store bucket."""

import logging
import os
import time
import uuid
from pathlib import Path
from typing import Optional

from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_ICON_SIZE = 2 * 1024 * 1024
ALLOWED_ICON_TYPES = ["image/png", "image/jpeg", "image/svg+xml", "image/webp"]

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/svg+xml": "svg",
    "image/webp": "webp",
}


class IconStore:
    """Stores uploaded endpoint icons and hands back their public URLs.

    Files live at ``{storage_dir}/{bucket}/{user_id}/{millis}.{ext}`` and are
    served from ``{public_base_url}/{bucket}/...``.
    """

    def __init__(
        self,
        storage_dir: Path,
        public_base_url: str,
        bucket: str = "endpoint-icons",
        max_file_size: int = MAX_ICON_SIZE,
        allowed_types: Optional[list[str]] = None,
    ):
        self.storage_dir = storage_dir
        self.public_base_url = public_base_url.rstrip("/")
        self.bucket = bucket
        self.max_file_size = max_file_size
        self.allowed_types = list(allowed_types or ALLOWED_ICON_TYPES)

    @classmethod
    def from_config(cls, config: ConfigManager) -> "IconStore":
        """Create an icon store from the ``uploads`` configuration section."""
        return cls(
            storage_dir=config.get_path("uploads.storage_dir", "~/.endpoint-registry/uploads"),
            public_base_url=config.get("uploads.public_base_url", "http://localhost:8000/static"),
            bucket=config.get("uploads.bucket", "endpoint-icons"),
            max_file_size=config.get("uploads.max_file_size", MAX_ICON_SIZE),
            allowed_types=config.get("uploads.allowed_types"),
        )

    @property
    def bucket_dir(self) -> Path:
        return self.storage_dir / self.bucket

    def check(self, content_type: str, data: bytes) -> None:
        """Check an upload against the type and size limits.

        Raises:
            ValidationError: On ``root`` if the upload is not acceptable
        """
        if content_type not in self.allowed_types or content_type not in _EXTENSIONS:
            raise ValidationError.for_field(
                "root", "Invalid file type. Only PNG, JPEG, SVG, and WebP are allowed."
            )
        if not data:
            raise ValidationError.for_field("root", "File is empty.")
        if len(data) > self.max_file_size:
            limit_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError.for_field(
                "root", f"File too large. Maximum size is {limit_mb:g}MB."
            )

    def store(self, user_id: str, filename: str, content_type: str, data: bytes) -> str:
        """Store an icon and return its public URL.

        Args:
            user_id: Uploading user id (first key segment)
            filename: Client file name, used for logging only
            content_type: MIME type of the upload
            data: File contents

        Returns:
            Public URL of the stored icon

        Raises:
            ValidationError: If the type or size is not allowed
        """
        self.check(content_type, data)

        stamp = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}"
        key = f"{_safe_segment(user_id)}/{stamp}.{_EXTENSIONS[content_type]}"
        target = self.bucket_dir / key
        target.parent.mkdir(parents=True, exist_ok=True)
        if target.exists():
            raise FileExistsError(f"Icon already stored at {key}")
        temp_file = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")

        try:
            with open(temp_file, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            temp_file.replace(target)
        except Exception:
            if temp_file.exists():
                temp_file.unlink()
            raise

        logger.info(f"Stored icon {filename!r} for {user_id} at {key} ({len(data)} bytes)")
        return f"{self.public_base_url}/{self.bucket}/{key}"

    def path_for(self, url: str) -> Optional[Path]:
        """Map a public URL back to its file, or None if it is not ours."""
        prefix = f"{self.public_base_url}/{self.bucket}/"
        if not url.startswith(prefix):
            return None
        path = (self.bucket_dir / url[len(prefix) :]).resolve()
        if self.bucket_dir.resolve() not in path.parents:
            return None
        return path

    def delete(self, url: str) -> bool:
        """Delete a stored icon by URL.

        Returns:
            True if a file was removed
        """
        path = self.path_for(url)
        if path is None or not path.exists():
            return False
        path.unlink()
        logger.info(f"Deleted icon {url}")
        return True


def _safe_segment(value: str) -> str:
    return "".join(c if c.isalnum() or c in "-_" else "_" for c in value) or "_"
