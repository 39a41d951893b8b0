"""Offer store: CRUD plus the visibility and validity rules."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, TypeVar
from uuid import UUID

from offer_catalog.domain.errors import OfferNotFoundError, UpstreamFailure
from offer_catalog.domain.offers import (
    CatalogStats,
    ImageRef,
    Offer,
    OfferDraft,
    is_active,
    summarize,
)

_T = TypeVar("_T")

_logger = logging.getLogger(__name__)


class OfferRepository(Protocol):
    """Persistence interface for offers."""

    def create_offer(self, draft: OfferDraft, image: ImageRef | None) -> Offer:
        """Insert an offer and return the stored row."""

    def get_offer(self, offer_id: UUID) -> Offer | None:
        """Return an offer by id, if present."""

    def update_offer(
        self, offer_id: UUID, draft: OfferDraft, image: ImageRef | None
    ) -> Offer | None:
        """Replace offer content; keep the current image when ``image`` is None."""

    def delete_offer(self, offer_id: UUID) -> bool:
        """Delete an offer and return whether a row was removed."""

    def toggle_visibility(self, offer_id: UUID) -> Offer | None:
        """Flip ``is_hidden`` atomically and return the persisted row."""

    def list_offers(self) -> list[Offer]:
        """Return all offers, newest first."""

    def list_public_offers(self, now: datetime) -> list[Offer]:
        """Return offers visible at ``now``, newest first."""

    def delete_all_offers(self) -> int:
        """Delete every offer and return how many were removed."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class OfferService:
    """Application service owning offer records."""

    repository: OfferRepository
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def create(self, draft: OfferDraft, image: ImageRef | None = None) -> Offer:
        """Validate and store a new offer."""
        clean = draft.validated()
        return await self._call(
            lambda: self.repository.create_offer(clean, image),
            failure="Failed to create offer",
        )

    async def get(self, offer_id: UUID) -> Offer:
        """Return an offer or raise OfferNotFoundError."""
        offer = await self._call(
            lambda: self.repository.get_offer(offer_id),
            failure="Failed to fetch offer",
        )
        if offer is None:
            raise OfferNotFoundError(offer_id)
        return offer

    async def update(
        self, offer_id: UUID, draft: OfferDraft, image: ImageRef | None = None
    ) -> Offer:
        """Validate and replace offer content."""
        clean = draft.validated()
        offer = await self._call(
            lambda: self.repository.update_offer(offer_id, clean, image),
            failure="Failed to update offer",
        )
        if offer is None:
            raise OfferNotFoundError(offer_id)
        return offer

    async def delete(self, offer_id: UUID) -> None:
        """Delete an offer or raise OfferNotFoundError."""
        deleted = await self._call(
            lambda: self.repository.delete_offer(offer_id),
            failure="Failed to delete offer",
        )
        if not deleted:
            raise OfferNotFoundError(offer_id)

    async def toggle_visibility(self, offer_id: UUID) -> Offer:
        """Flip the hidden flag and return what was persisted."""
        offer = await self._call(
            lambda: self.repository.toggle_visibility(offer_id),
            failure="Failed to toggle offer visibility",
        )
        if offer is None:
            raise OfferNotFoundError(offer_id)
        return offer

    async def list_all(self) -> list[Offer]:
        """Return every offer for administrators, newest first."""
        offers = await self._call(
            self.repository.list_offers, failure="Failed to fetch offers"
        )
        return _newest_first(offers)

    async def list_public(self, now: datetime | None = None) -> list[Offer]:
        """Return offers the public may see at ``now``, newest first."""
        moment = now or self.clock()
        offers = await self._call(
            lambda: self.repository.list_public_offers(moment),
            failure="Failed to fetch offers",
        )
        return _newest_first([offer for offer in offers if is_active(offer, moment)])

    async def catalog_stats(self, now: datetime | None = None) -> CatalogStats:
        """Return offer counts by derived status."""
        offers = await self.list_all()
        return summarize(offers, now or self.clock())

    async def clear(self) -> int:
        """Delete every offer."""
        return await self._call(
            self.repository.delete_all_offers, failure="Failed to clear offers"
        )

    async def _call(self, func: Callable[[], _T], *, failure: str) -> _T:
        """Run a blocking repository call off the event loop."""
        try:
            return await asyncio.to_thread(func)
        except Exception as exc:
            _logger.exception("Offer store call failed: %s", failure)
            raise UpstreamFailure(failure) from exc


def _newest_first(offers: list[Offer]) -> list[Offer]:
    return sorted(offers, key=lambda offer: offer.created_at, reverse=True)
