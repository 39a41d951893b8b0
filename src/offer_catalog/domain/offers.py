"""Domain models and invariants for offers."""

import math
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from offer_catalog.domain.errors import OfferValidationError

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000

MISSING_FIELDS_MESSAGE = "All fields are required"
PRICE_ORDER_MESSAGE = "Discounted price must be less than original price"
WINDOW_ORDER_MESSAGE = "Valid from date must be before valid until date"


class OfferStatus(Enum):
    """Admin-facing lifecycle label for an offer."""

    ACTIVE = "active"
    SCHEDULED = "scheduled"
    EXPIRED = "expired"
    HIDDEN = "hidden"


@dataclass(frozen=True)
class ImageRef:
    """Reference to an uploaded image: storage key plus public URL."""

    object_key: str
    public_url: str


@dataclass(frozen=True)
class OfferDraft:
    """Administrator-supplied offer content for a create or update."""

    title: str
    description: str
    original_price: float
    discounted_price: float
    valid_from: datetime
    valid_until: datetime

    def validated(self) -> "OfferDraft":
        """Return a normalized copy or raise OfferValidationError."""
        title = (self.title or "").strip()
        description = (self.description or "").strip()
        if not title or not description:
            raise OfferValidationError(MISSING_FIELDS_MESSAGE)
        if len(title) > TITLE_MAX_LENGTH:
            raise OfferValidationError(
                f"Title must be at most {TITLE_MAX_LENGTH} characters"
            )
        if len(description) > DESCRIPTION_MAX_LENGTH:
            raise OfferValidationError(
                f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters"
            )
        original_price = _price(self.original_price)
        discounted_price = _price(self.discounted_price)
        check_price_order(original_price, discounted_price)
        valid_from = ensure_aware(self.valid_from)
        valid_until = ensure_aware(self.valid_until)
        check_window_order(valid_from, valid_until)
        return replace(
            self,
            title=title,
            description=description,
            original_price=original_price,
            discounted_price=discounted_price,
            valid_from=valid_from,
            valid_until=valid_until,
        )


@dataclass(frozen=True)
class Offer:
    """A persisted offer."""

    id: UUID
    title: str
    description: str
    original_price: float
    discounted_price: float
    valid_from: datetime
    valid_until: datetime
    is_hidden: bool
    created_at: datetime
    updated_at: datetime
    image: ImageRef | None = None

    def is_active(self, now: datetime) -> bool:
        """Return true when the offer is visible to the public at ``now``."""
        return is_active(self, now)

    def status(self, now: datetime) -> OfferStatus:
        """Return the admin-facing status at ``now``."""
        return offer_status(self, now)


@dataclass(frozen=True)
class CatalogStats:
    """Counts of offers by derived state."""

    total: int
    active: int
    hidden: int
    scheduled: int
    expired: int


def is_active(offer: Offer, now: datetime) -> bool:
    """Return true when ``now`` is inside the validity window and not hidden."""
    moment = ensure_aware(now)
    return (
        not offer.is_hidden
        and ensure_aware(offer.valid_from) <= moment <= ensure_aware(offer.valid_until)
    )


def offer_status(offer: Offer, now: datetime) -> OfferStatus:
    """Classify an offer for the admin dashboard."""
    moment = ensure_aware(now)
    if offer.is_hidden:
        return OfferStatus.HIDDEN
    if moment < ensure_aware(offer.valid_from):
        return OfferStatus.SCHEDULED
    if moment > ensure_aware(offer.valid_until):
        return OfferStatus.EXPIRED
    return OfferStatus.ACTIVE


def summarize(offers: list[Offer], now: datetime) -> CatalogStats:
    """Count offers by status."""
    statuses = [offer_status(offer, now) for offer in offers]
    return CatalogStats(
        total=len(offers),
        active=statuses.count(OfferStatus.ACTIVE),
        hidden=statuses.count(OfferStatus.HIDDEN),
        scheduled=statuses.count(OfferStatus.SCHEDULED),
        expired=statuses.count(OfferStatus.EXPIRED),
    )


def check_price_order(original_price: float, discounted_price: float) -> None:
    """Reject prices that would not be a discount."""
    if discounted_price >= original_price:
        raise OfferValidationError(PRICE_ORDER_MESSAGE)


def check_window_order(valid_from: datetime, valid_until: datetime) -> None:
    """Reject validity windows that are empty or inverted."""
    if ensure_aware(valid_from) >= ensure_aware(valid_until):
        raise OfferValidationError(WINDOW_ORDER_MESSAGE)


def ensure_aware(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _price(value: float) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError) as exc:
        raise OfferValidationError("Prices must be numbers") from exc
    if math.isnan(price) or math.isinf(price):
        raise OfferValidationError("Prices must be numbers")
    if price < 0:
        raise OfferValidationError("Prices must be non-negative")
    return price
