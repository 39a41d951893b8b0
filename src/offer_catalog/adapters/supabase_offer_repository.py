"""Supabase-backed offer repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from offer_catalog.domain.offers import ImageRef, Offer, OfferDraft
from offer_catalog.services.offers import OfferRepository

_TABLE = "offers"
_COLUMNS = (
    "id, title, description, original_price, discounted_price, valid_from, "
    "valid_until, image_key, image_url, is_hidden, created_at, updated_at"
)
_NIL_ID = "00000000-0000-0000-0000-000000000000"


@dataclass
class SupabaseOfferRepository(OfferRepository):
    """Supabase implementation for offer persistence."""

    client: Client

    def create_offer(self, draft: OfferDraft, image: ImageRef | None) -> Offer:
        """Insert an offer row and return it."""
        payload = _draft_payload(draft)
        payload["image_key"] = image.object_key if image else None
        payload["image_url"] = image.public_url if image else None
        payload["is_hidden"] = False
        response = self.client.table(_TABLE).insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create offer")
        return _offer_from_row(response.data[0])

    def get_offer(self, offer_id: UUID) -> Offer | None:
        """Return an offer by id, if present."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("id", str(offer_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _offer_from_row(response.data[0])

    def update_offer(
        self, offer_id: UUID, draft: OfferDraft, image: ImageRef | None
    ) -> Offer | None:
        """Replace offer content and bump updated_at."""
        payload = _draft_payload(draft)
        if image is not None:
            payload["image_key"] = image.object_key
            payload["image_url"] = image.public_url
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table(_TABLE).update(payload).eq("id", str(offer_id)).execute()
        )
        if not response.data:
            return None
        return _offer_from_row(response.data[0])

    def delete_offer(self, offer_id: UUID) -> bool:
        """Delete an offer row."""
        response = self.client.table(_TABLE).delete().eq("id", str(offer_id)).execute()
        return bool(response.data)

    def toggle_visibility(self, offer_id: UUID) -> Offer | None:
        """Flip is_hidden in a single statement on the database side."""
        response = self.client.rpc(
            "toggle_offer_visibility", {"target_id": str(offer_id)}
        ).execute()
        rows = response.data
        if isinstance(rows, dict):
            rows = [rows]
        if not rows:
            return None
        return _offer_from_row(rows[0])

    def list_offers(self) -> list[Offer]:
        """Return all offers, newest first."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        return [_offer_from_row(row) for row in response.data or []]

    def list_public_offers(self, now: datetime) -> list[Offer]:
        """Return visible offers whose window contains ``now``."""
        moment = now.isoformat()
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("is_hidden", False)
            .lte("valid_from", moment)
            .gte("valid_until", moment)
            .order("created_at", desc=True)
            .execute()
        )
        return [_offer_from_row(row) for row in response.data or []]

    def delete_all_offers(self) -> int:
        """Delete every offer row."""
        response = self.client.table(_TABLE).delete().neq("id", _NIL_ID).execute()
        return len(response.data or [])


def _draft_payload(draft: OfferDraft) -> dict[str, object]:
    return {
        "title": draft.title,
        "description": draft.description,
        "original_price": draft.original_price,
        "discounted_price": draft.discounted_price,
        "valid_from": draft.valid_from.isoformat(),
        "valid_until": draft.valid_until.isoformat(),
    }


def _offer_from_row(row: dict[str, object]) -> Offer:
    image_key = row.get("image_key")
    image_url = row.get("image_url")
    image = (
        ImageRef(object_key=str(image_key), public_url=str(image_url))
        if image_key and image_url
        else None
    )
    return Offer(
        id=UUID(str(row["id"])),
        title=str(row["title"]),
        description=str(row["description"]),
        original_price=float(row["original_price"]),
        discounted_price=float(row["discounted_price"]),
        valid_from=_parse_timestamp(row["valid_from"]),
        valid_until=_parse_timestamp(row["valid_until"]),
        is_hidden=bool(row.get("is_hidden")),
        created_at=_parse_timestamp(row["created_at"]),
        updated_at=_parse_timestamp(row.get("updated_at") or row["created_at"]),
        image=image,
    )


def _parse_timestamp(value: object) -> datetime:
    parsed = (
        value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    )
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
