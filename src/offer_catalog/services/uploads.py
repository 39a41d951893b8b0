"""Upload grants for direct client-to-storage image transfers."""

import asyncio
import logging
import mimetypes
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import uuid4

from offer_catalog.domain.errors import UploadRejectedError, UpstreamFailure
from offer_catalog.domain.uploads import UploadGrant

_IMAGE_PREFIX = "image/"
_EXTENSION_PATTERN = re.compile(r"^[a-z0-9]{1,8}$")
_PREFERRED_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/avif": "avif",
    "image/svg+xml": "svg",
}

_logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Interface to the object store holding offer images."""

    def create_signed_upload_url(
        self, object_key: str, content_type: str, expires_in: int
    ) -> str:
        """Return a presigned PUT URL for exactly one object key."""

    def delete_object(self, object_key: str) -> None:
        """Delete an object by key."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class UploadBroker:
    """Mints upload grants and deletes stored images.

    The broker never sees image bytes; it only scopes a write permission to a
    freshly generated key and declared content type.
    """

    blob_store: BlobStore
    public_base_url: str
    key_prefix: str = "offers"
    grant_ttl_seconds: int = 3600
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def request_upload_grant(
        self, file_name: str, content_type: str
    ) -> UploadGrant:
        """Return a grant for uploading one image, or raise UploadRejectedError."""
        declared_type = (content_type or "").strip().lower()
        if not (file_name or "").strip() or not declared_type:
            raise UploadRejectedError("fileName and fileType are required")
        if not declared_type.startswith(_IMAGE_PREFIX):
            raise UploadRejectedError("Only image files are allowed")

        object_key = self._new_object_key(file_name, declared_type)
        issued_at = self.clock()
        try:
            url = await asyncio.to_thread(
                self.blob_store.create_signed_upload_url,
                object_key,
                declared_type,
                self.grant_ttl_seconds,
            )
        except Exception as exc:
            _logger.exception("Failed to create upload grant for %s", object_key)
            raise UpstreamFailure("Failed to generate signed URL") from exc
        return UploadGrant(
            url=url,
            object_key=object_key,
            public_url=self.public_url_for(object_key),
            content_type=declared_type,
            expires_at=issued_at + timedelta(seconds=self.grant_ttl_seconds),
        )

    async def delete_object(self, object_key: str) -> bool:
        """Delete a stored image; failures are logged and reported as False."""
        try:
            await asyncio.to_thread(self.blob_store.delete_object, object_key)
        except Exception:
            _logger.warning(
                "Failed to delete stored image %s", object_key, exc_info=True
            )
            return False
        return True

    def public_url_for(self, object_key: str) -> str:
        """Return the public URL an object key is served from."""
        return f"{self.public_base_url.rstrip('/')}/{object_key}"

    def owns_key(self, object_key: str) -> bool:
        """Return true for keys this broker could have issued."""
        prefix = f"{self.key_prefix.strip('/')}/"
        if not object_key.startswith(prefix):
            return False
        name = object_key[len(prefix) :]
        return bool(name) and "/" not in name and ".." not in name and "\\" not in name

    def _new_object_key(self, file_name: str, content_type: str) -> str:
        extension = _extension_for(file_name, content_type)
        name = uuid4().hex
        if extension:
            name = f"{name}.{extension}"
        return f"{self.key_prefix.strip('/')}/{name}"


def _extension_for(file_name: str, content_type: str) -> str | None:
    """Pick a file extension from the declared type, else a safe name suffix."""
    preferred = _PREFERRED_EXTENSIONS.get(content_type)
    if preferred:
        return preferred
    guessed = mimetypes.guess_extension(content_type)
    if guessed:
        return guessed.lstrip(".")
    _, dot, suffix = file_name.rpartition(".")
    suffix = suffix.lower()
    if dot and _EXTENSION_PATTERN.match(suffix):
        return suffix
    return None
