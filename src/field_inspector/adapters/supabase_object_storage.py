"""Supabase Storage bucket client."""

from dataclasses import dataclass
from urllib.parse import unquote, urlparse

from supabase import Client

from field_inspector.domain.errors import StorageConflictError
from field_inspector.services.photos import ObjectStorageClient

_CONFLICT_HINTS = ("already exists", "duplicate", "409")


@dataclass
class SupabaseObjectStorage(ObjectStorageClient):
    """Object storage backed by a Supabase Storage bucket."""

    client: Client
    bucket: str

    def put_object(
        self, key: str, data: bytes, content_type: str, *, upsert: bool
    ) -> None:
        """Upload bytes to the bucket."""
        try:
            self.client.storage.from_(self.bucket).upload(
                key,
                data,
                {"content-type": content_type, "upsert": "true" if upsert else "false"},
            )
        except Exception as exc:
            if _is_conflict(exc):
                raise StorageConflictError(str(exc)) from exc
            raise

    def public_url(self, key: str) -> str:
        """Return the public URL for a key."""
        return self.client.storage.from_(self.bucket).get_public_url(key).rstrip("?")

    def key_for_url(self, url: str) -> str | None:
        """Extract the object key from a public bucket URL."""
        path = unquote(urlparse(url).path)
        marker = f"/object/public/{self.bucket}/"
        if marker not in path:
            return None
        return path.split(marker, 1)[1] or None

    def remove_object(self, key: str) -> None:
        """Delete an object from the bucket."""
        self.client.storage.from_(self.bucket).remove([key])


def _is_conflict(exc: Exception) -> bool:
    status = getattr(exc, "status", None) or getattr(exc, "status_code", None)
    if str(status) == "409":
        return True
    message = str(exc).lower()
    return any(hint in message for hint in _CONFLICT_HINTS)
