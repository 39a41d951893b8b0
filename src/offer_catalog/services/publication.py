"""Publication pipeline: offer writes combined with image uploads.

The blob store and the offer store cannot share a transaction, so create and
update run as a saga:

1. validate the draft,
2. obtain an upload grant from the broker,
3. let the caller transfer the bytes,
4. commit the offer with the uploaded object's key and public URL.

A failure before step 4 leaves the offer store untouched. A failure in step 4
after a successful transfer leaves an unreferenced object behind; it is
reported to ``on_orphaned_object`` instead of being rolled back.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from uuid import UUID

from offer_catalog.domain.errors import (
    OfferNotFoundError,
    OfferValidationError,
    UploadTransferError,
    UpstreamFailure,
)
from offer_catalog.domain.offers import ImageRef, Offer, OfferDraft
from offer_catalog.domain.uploads import UploadGrant, UploadReceipt
from offer_catalog.services.offers import OfferService
from offer_catalog.services.uploads import UploadBroker

Transfer = Callable[[UploadGrant], Awaitable[None]]
OrphanHook = Callable[[str, str], None]

_logger = logging.getLogger(__name__)


def log_orphaned_object(object_key: str, reason: str) -> None:
    """Default reconciliation hook: record the orphan for out-of-band cleanup."""
    _logger.warning("Unreferenced stored image %s (%s)", object_key, reason)


@dataclass
class PublicationService:
    """Orchestrates the upload broker and the offer store."""

    offer_service: OfferService
    upload_broker: UploadBroker
    on_orphaned_object: OrphanHook = field(default=log_orphaned_object)

    async def request_upload(self, file_name: str, content_type: str) -> UploadGrant:
        """Return an upload grant for a caller-side transfer."""
        return await self.upload_broker.request_upload_grant(file_name, content_type)

    async def publish(
        self, draft: OfferDraft, receipt: UploadReceipt | None = None
    ) -> Offer:
        """Create an offer after the caller reported any upload as done."""
        clean = draft.validated()
        image = self._image_from_receipt(receipt)
        return await self._commit(
            lambda: self.offer_service.create(clean, image), image
        )

    async def revise(
        self, offer_id: UUID, draft: OfferDraft, receipt: UploadReceipt | None = None
    ) -> Offer:
        """Update an offer; a new image replaces the previous one."""
        clean = draft.validated()
        image = self._image_from_receipt(receipt)
        replaced: list[ImageRef] = []

        async def write() -> Offer:
            if image is not None:
                current = await self.offer_service.get(offer_id)
                if current.image and current.image.object_key != image.object_key:
                    replaced.append(current.image)
            return await self.offer_service.update(offer_id, clean, image)

        offer = await self._commit(write, image)
        for old_image in replaced:
            await self._delete_image(old_image.object_key, "replaced")
        return offer

    async def publish_with_image(
        self, draft: OfferDraft, file_name: str, content_type: str, transfer: Transfer
    ) -> Offer:
        """Run the whole saga for a new offer with an image."""
        clean = draft.validated()
        receipt = await self._upload(file_name, content_type, transfer)
        return await self.publish(clean, receipt)

    async def revise_with_image(
        self,
        offer_id: UUID,
        draft: OfferDraft,
        file_name: str,
        content_type: str,
        transfer: Transfer,
    ) -> Offer:
        """Run the whole saga for replacing an offer's content and image."""
        clean = draft.validated()
        await self.offer_service.get(offer_id)
        receipt = await self._upload(file_name, content_type, transfer)
        return await self.revise(offer_id, clean, receipt)

    async def retract(self, offer_id: UUID) -> None:
        """Delete an offer and, best-effort, its image."""
        offer = await self.offer_service.get(offer_id)
        if offer.image is not None:
            await self._delete_image(offer.image.object_key, "offer deleted")
        await self.offer_service.delete(offer_id)

    async def _upload(
        self, file_name: str, content_type: str, transfer: Transfer
    ) -> UploadReceipt:
        grant = await self.upload_broker.request_upload_grant(file_name, content_type)
        try:
            await transfer(grant)
        except Exception as exc:
            _logger.warning("Image transfer failed for %s", grant.object_key)
            raise UploadTransferError("Failed to upload image") from exc
        return UploadReceipt(object_key=grant.object_key, public_url=grant.public_url)

    def _image_from_receipt(self, receipt: UploadReceipt | None) -> ImageRef | None:
        if receipt is None:
            return None
        object_key = receipt.object_key.strip()
        if not self.upload_broker.owns_key(object_key):
            raise OfferValidationError("Invalid image key")
        public_url = self.upload_broker.public_url_for(object_key)
        if receipt.public_url and receipt.public_url.strip() != public_url:
            raise OfferValidationError("Image URL does not match image key")
        return ImageRef(object_key=object_key, public_url=public_url)

    async def _commit(
        self, write: Callable[[], Awaitable[Offer]], image: ImageRef | None
    ) -> Offer:
        try:
            return await write()
        except (OfferNotFoundError, UpstreamFailure):
            if image is not None:
                self.on_orphaned_object(image.object_key, "offer commit failed")
            raise

    async def _delete_image(self, object_key: str, reason: str) -> None:
        if not await self.upload_broker.delete_object(object_key):
            self.on_orphaned_object(object_key, f"{reason}, delete failed")
