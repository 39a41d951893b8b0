"""Public, unauthenticated offer listing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from offer_catalog.api.models import serialize_offer

if TYPE_CHECKING:
    from offer_catalog.containers import AppContainer

router = APIRouter(prefix="/api", tags=["public"])


@router.get("/offers")
async def list_public_offers(request: Request) -> dict[str, object]:
    """Return offers that are currently active, newest first."""
    container: AppContainer = request.app.state.container
    now = container.offer_service.clock()
    offers = await container.offer_service.list_public(now)
    return {"offers": [serialize_offer(offer, now) for offer in offers]}
