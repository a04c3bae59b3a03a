"""Photo upload with a simulated-URL fallback."""

import logging
import re
import time
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Protocol
from uuid import uuid4

from field_inspector.domain.errors import StorageConflictError
from field_inspector.domain.media import PhotoUpload

logger = logging.getLogger(__name__)

SIMULATED_UPLOAD_MARKER = "simulated-upload"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ObjectStorageClient(Protocol):
    """Interface for a bucket-style object store."""

    def put_object(
        self, key: str, data: bytes, content_type: str, *, upsert: bool
    ) -> None:
        """Store bytes under a key; raise StorageConflictError if it exists."""

    def public_url(self, key: str) -> str:
        """Return a publicly fetchable URL for a key."""

    def key_for_url(self, url: str) -> str | None:
        """Return the key behind a public URL, or None if it is not ours."""

    def remove_object(self, key: str) -> None:
        """Delete an object."""


def is_simulated_url(url: str | None) -> bool:
    return bool(url) and f"/{SIMULATED_UPLOAD_MARKER}/" in url


def sanitize_filename(name: str | None) -> str:
    """Reduce a client-supplied filename to URL-safe characters."""
    base = PurePosixPath((name or "").replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "photo"


@dataclass
class PhotoUploadService:
    """Uploads photos to object storage, never failing the caller.

    Without a storage client, or when the upload fails for any reason other
    than a key conflict, the service returns a simulated URL carrying the
    ``simulated-upload`` marker instead of raising.
    """

    storage: ObjectStorageClient | None
    simulated_base_url: str = "https://storage.local"

    @property
    def external(self) -> bool:
        return self.storage is not None

    def upload(
        self,
        data: bytes,
        owner_id: str | int,
        original_name: str | None,
        mime_type: str | None,
    ) -> PhotoUpload:
        """Upload photo bytes and return the resulting URL."""
        filename = f"{int(time.time() * 1000)}-{sanitize_filename(original_name)}"
        content_type = mime_type or "application/octet-stream"
        if self.storage is None:
            return self._simulated(owner_id, filename)

        key = f"photos/{owner_id}/{filename}"
        try:
            try:
                self.storage.put_object(key, data, content_type, upsert=False)
            except StorageConflictError:
                key = _unique_key(key)
                logger.info("Storage key taken, retrying", extra={"key": key})
                self.storage.put_object(key, data, content_type, upsert=True)
            return PhotoUpload(url=self.storage.public_url(key), stored=True)
        except Exception:
            logger.exception(
                "Photo upload failed, using simulated URL",
                extra={"owner_id": owner_id, "key": key},
            )
            return self._simulated(owner_id, filename)

    def delete(self, url: str | None, owner_id: str | int) -> bool:
        """Best-effort removal of a previously uploaded photo."""
        if not url or is_simulated_url(url) or self.storage is None:
            return False
        key = self.storage.key_for_url(url)
        if key is None or not key.startswith(f"photos/{owner_id}/"):
            logger.warning("Photo URL outside owner prefix", extra={"url": url})
            return False
        try:
            self.storage.remove_object(key)
        except Exception:
            logger.exception("Photo delete failed", extra={"key": key})
            return False
        return True

    def _simulated(self, owner_id: str | int, filename: str) -> PhotoUpload:
        base = self.simulated_base_url.rstrip("/")
        return PhotoUpload(
            url=f"{base}/{SIMULATED_UPLOAD_MARKER}/{owner_id}/{filename}",
            stored=False,
        )


def _unique_key(key: str) -> str:
    path = PurePosixPath(key)
    return str(path.with_name(f"{path.stem}-{uuid4().hex}{path.suffix}"))
