"""Pydantic request models and JSON serializers for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from offer_catalog.domain.admins import AdministratorIdentity
from offer_catalog.domain.errors import OfferValidationError
from offer_catalog.domain.offers import Offer, OfferDraft
from offer_catalog.domain.uploads import UploadGrant, UploadReceipt


class OfferPayload(BaseModel):
    """Body of offer create and update requests."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    original_price: float = Field(alias="originalPrice")
    discounted_price: float = Field(alias="discountedPrice")
    valid_from: datetime = Field(alias="validFrom")
    valid_until: datetime = Field(alias="validUntil")
    image_key: str | None = Field(default=None, alias="imageKey")
    image_url: str | None = Field(default=None, alias="imageUrl")

    @model_validator(mode="after")
    def _check_invariants(self) -> "OfferPayload":
        try:
            self.to_draft().validated()
        except OfferValidationError as exc:
            raise ValueError(str(exc)) from exc
        if not _blank(self.image_url) and _blank(self.image_key):
            raise ValueError("imageKey is required when imageUrl is set")
        return self

    def to_draft(self) -> OfferDraft:
        """Return the offer content as a domain draft."""
        return OfferDraft(
            title=self.title,
            description=self.description,
            original_price=self.original_price,
            discounted_price=self.discounted_price,
            valid_from=self.valid_from,
            valid_until=self.valid_until,
        )

    def receipt(self) -> UploadReceipt | None:
        """Return the caller's upload report, if an image was uploaded."""
        if _blank(self.image_key):
            return None
        return UploadReceipt(
            object_key=str(self.image_key).strip(),
            public_url=None if _blank(self.image_url) else str(self.image_url).strip(),
        )


class UploadRequest(BaseModel):
    """Body of an upload grant request."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str | None = Field(default=None, alias="fileName")
    file_type: str | None = Field(default=None, alias="fileType")


class LoginRequest(BaseModel):
    """Body of a login request."""

    email: str | None = None
    password: str | None = None


def serialize_offer(offer: Offer, now: datetime) -> dict[str, object]:
    """Return the camelCase JSON representation of an offer."""
    return {
        "id": str(offer.id),
        "title": offer.title,
        "description": offer.description,
        "originalPrice": offer.original_price,
        "discountedPrice": offer.discounted_price,
        "validFrom": offer.valid_from.isoformat(),
        "validUntil": offer.valid_until.isoformat(),
        "imageKey": offer.image.object_key if offer.image else None,
        "imageUrl": offer.image.public_url if offer.image else None,
        "isHidden": offer.is_hidden,
        "isActive": offer.is_active(now),
        "status": offer.status(now).value,
        "createdAt": offer.created_at.isoformat(),
        "updatedAt": offer.updated_at.isoformat(),
    }


def serialize_grant(grant: UploadGrant) -> dict[str, object]:
    """Return the JSON representation of an upload grant."""
    return {
        "uploadGrant": {
            "url": grant.url,
            "method": grant.method,
            "contentType": grant.content_type,
            "expiresAt": grant.expires_at.isoformat(),
        },
        "objectKey": grant.object_key,
        "publicUrl": grant.public_url,
    }


def serialize_admin(identity: AdministratorIdentity) -> dict[str, str]:
    """Return the public fields of an administrator."""
    return {"id": str(identity.id), "email": identity.email, "name": identity.name}


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()
