"""Privileged offer and upload endpoints behind the session gate."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from offer_catalog.api.gate import require_admin
from offer_catalog.api.models import (
    OfferPayload,
    UploadRequest,
    serialize_grant,
    serialize_offer,
)
from offer_catalog.domain.errors import OfferNotFoundError

if TYPE_CHECKING:
    from offer_catalog.containers import AppContainer

router = APIRouter(
    prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)]
)


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _parse_offer_id(raw: str) -> UUID:
    try:
        return UUID(raw)
    except ValueError as exc:
        raise OfferNotFoundError(raw) from exc


@router.get("/offers")
async def list_offers(request: Request) -> dict[str, object]:
    """Return every offer, including hidden and expired ones."""
    container = _container(request)
    offers = await container.offer_service.list_all()
    now = container.offer_service.clock()
    return {"offers": [serialize_offer(offer, now) for offer in offers]}


@router.post("/offers", status_code=status.HTTP_201_CREATED)
async def create_offer(payload: OfferPayload, request: Request) -> dict[str, object]:
    """Create an offer, attaching an already uploaded image if reported."""
    container = _container(request)
    offer = await container.publication_service.publish(
        payload.to_draft(), payload.receipt()
    )
    return {"offer": serialize_offer(offer, container.offer_service.clock())}


@router.get("/offers/{offer_id}")
async def get_offer(offer_id: str, request: Request) -> dict[str, object]:
    """Return one offer."""
    container = _container(request)
    offer = await container.offer_service.get(_parse_offer_id(offer_id))
    return {"offer": serialize_offer(offer, container.offer_service.clock())}


@router.put("/offers/{offer_id}")
async def update_offer(
    offer_id: str, payload: OfferPayload, request: Request
) -> dict[str, object]:
    """Replace an offer's content."""
    container = _container(request)
    offer = await container.publication_service.revise(
        _parse_offer_id(offer_id), payload.to_draft(), payload.receipt()
    )
    return {"offer": serialize_offer(offer, container.offer_service.clock())}


@router.delete("/offers/{offer_id}")
async def delete_offer(offer_id: str, request: Request) -> dict[str, object]:
    """Delete an offer and, best-effort, its image."""
    container = _container(request)
    await container.publication_service.retract(_parse_offer_id(offer_id))
    return {"success": True}


@router.patch("/offers/{offer_id}/toggle")
async def toggle_offer(offer_id: str, request: Request) -> dict[str, object]:
    """Flip whether the offer is hidden from the public."""
    container = _container(request)
    offer = await container.offer_service.toggle_visibility(_parse_offer_id(offer_id))
    return {"offer": serialize_offer(offer, container.offer_service.clock())}


@router.post("/upload/signed-url")
async def create_upload_grant(
    payload: UploadRequest, request: Request
) -> dict[str, object]:
    """Mint an upload grant for one image."""
    container = _container(request)
    grant = await container.publication_service.request_upload(
        payload.file_name or "", payload.file_type or ""
    )
    return serialize_grant(grant)
