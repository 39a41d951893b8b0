"""Tests for the privileged offer and upload endpoints."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from offer_catalog.domain.offers import (
    MISSING_FIELDS_MESSAGE,
    PRICE_ORDER_MESSAGE,
    WINDOW_ORDER_MESSAGE,
)
from tests.conftest import (
    CDN_BASE_URL,
    FakeBlobStore,
    InMemoryOfferRepository,
    admin_client,
    offer_payload,
)


def test_create_offer_returns_201_with_camel_case_body(
    container, admin_identity
) -> None:
    client = admin_client(container, admin_identity)

    response = client.post("/api/admin/offers", json=offer_payload(title="  Deal "))

    assert response.status_code == 201
    offer = response.json()["offer"]
    assert offer["title"] == "Deal"
    assert offer["originalPrice"] == 100
    assert offer["discountedPrice"] == 50
    assert offer["isHidden"] is False
    assert offer["isActive"] is True
    assert offer["status"] == "active"
    assert offer["imageKey"] is None
    assert offer["imageUrl"] is None


def test_create_offer_with_missing_field_gets_400(container, admin_identity) -> None:
    client = admin_client(container, admin_identity)
    body = offer_payload()
    del body["title"]

    response = client.post("/api/admin/offers", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": MISSING_FIELDS_MESSAGE}


def test_create_offer_with_blank_title_gets_400(container, admin_identity) -> None:
    client = admin_client(container, admin_identity)

    response = client.post("/api/admin/offers", json=offer_payload(title="   "))

    assert response.status_code == 400
    assert response.json() == {"error": MISSING_FIELDS_MESSAGE}


def test_create_offer_with_null_field_gets_400(container, admin_identity) -> None:
    client = admin_client(container, admin_identity)

    title = client.post("/api/admin/offers", json=offer_payload(title=None))
    price = client.post("/api/admin/offers", json=offer_payload(originalPrice=None))

    assert title.status_code == 400
    assert title.json() == {"error": MISSING_FIELDS_MESSAGE}
    assert price.status_code == 400
    assert price.json() == {"error": MISSING_FIELDS_MESSAGE}


def test_price_and_window_violations_get_400(
    container, admin_identity, offer_repository: InMemoryOfferRepository
) -> None:
    client = admin_client(container, admin_identity)
    body = offer_payload()

    price = client.post(
        "/api/admin/offers", json={**body, "discountedPrice": body["originalPrice"]}
    )
    window = client.post(
        "/api/admin/offers", json={**body, "validUntil": body["validFrom"]}
    )

    assert price.status_code == 400
    assert price.json() == {"error": PRICE_ORDER_MESSAGE}
    assert window.status_code == 400
    assert window.json() == {"error": WINDOW_ORDER_MESSAGE}
    assert offer_repository.offers == {}


def test_non_numeric_price_gets_400(container, admin_identity) -> None:
    client = admin_client(container, admin_identity)

    response = client.post(
        "/api/admin/offers", json=offer_payload(originalPrice="lots")
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid value for originalPrice"}


def test_get_update_delete_round_trip(container, admin_identity) -> None:
    client = admin_client(container, admin_identity)
    offer_id = client.post("/api/admin/offers", json=offer_payload()).json()["offer"][
        "id"
    ]

    fetched = client.get(f"/api/admin/offers/{offer_id}")
    updated = client.put(
        f"/api/admin/offers/{offer_id}", json=offer_payload(title="Updated")
    )
    deleted = client.delete(f"/api/admin/offers/{offer_id}")
    missing = client.get(f"/api/admin/offers/{offer_id}")

    assert fetched.status_code == 200
    assert fetched.json()["offer"]["id"] == offer_id
    assert updated.status_code == 200
    assert updated.json()["offer"]["title"] == "Updated"
    assert deleted.json() == {"success": True}
    assert missing.status_code == 404
    assert missing.json() == {"error": "Offer not found"}


def test_unknown_and_malformed_ids_get_404(container, admin_identity) -> None:
    client = admin_client(container, admin_identity)

    assert client.get(f"/api/admin/offers/{uuid4()}").status_code == 404
    assert client.get("/api/admin/offers/not-a-uuid").status_code == 404
    assert client.patch("/api/admin/offers/not-a-uuid/toggle").status_code == 404
    assert client.delete(f"/api/admin/offers/{uuid4()}").status_code == 404
    assert (
        client.put(f"/api/admin/offers/{uuid4()}", json=offer_payload()).status_code
        == 404
    )


def test_toggle_hides_offer_from_public_listing(container, admin_identity) -> None:
    client = admin_client(container, admin_identity)
    offer_id = client.post("/api/admin/offers", json=offer_payload()).json()["offer"][
        "id"
    ]

    def public_ids() -> list[str]:
        return [offer["id"] for offer in client.get("/api/offers").json()["offers"]]

    assert public_ids() == [offer_id]

    hidden = client.patch(f"/api/admin/offers/{offer_id}/toggle")
    assert hidden.json()["offer"]["isHidden"] is True
    assert hidden.json()["offer"]["status"] == "hidden"
    assert public_ids() == []
    admin_ids = [o["id"] for o in client.get("/api/admin/offers").json()["offers"]]
    assert admin_ids == [offer_id]

    shown = client.patch(f"/api/admin/offers/{offer_id}/toggle")
    assert shown.json()["offer"]["isHidden"] is False
    assert public_ids() == [offer_id]


def test_upload_grant_then_create_with_image(
    container, admin_identity, blob_store: FakeBlobStore
) -> None:
    client = admin_client(container, admin_identity)

    grant = client.post(
        "/api/admin/upload/signed-url",
        json={"fileName": "photo.jpg", "fileType": "image/jpeg"},
    )
    body = grant.json()
    created = client.post(
        "/api/admin/offers",
        json=offer_payload(imageKey=body["objectKey"], imageUrl=body["publicUrl"]),
    )

    assert grant.status_code == 200
    assert body["uploadGrant"]["method"] == "PUT"
    assert body["uploadGrant"]["contentType"] == "image/jpeg"
    assert body["uploadGrant"]["url"].startswith("https://storage.example.com/")
    assert body["publicUrl"] == f"{CDN_BASE_URL}/{body['objectKey']}"
    assert blob_store.grants[0][0] == body["objectKey"]
    offer = created.json()["offer"]
    assert offer["imageKey"] == body["objectKey"]
    assert offer["imageUrl"] == body["publicUrl"]


def test_update_with_new_image_removes_previous_object(
    container, admin_identity, blob_store: FakeBlobStore
) -> None:
    client = admin_client(container, admin_identity)
    first = client.post(
        "/api/admin/offers", json=offer_payload(imageKey="offers/first.png")
    ).json()["offer"]

    response = client.put(
        f"/api/admin/offers/{first['id']}",
        json=offer_payload(imageKey="offers/second.png"),
    )

    assert response.json()["offer"]["imageKey"] == "offers/second.png"
    assert blob_store.deleted == ["offers/first.png"]


def test_create_rejects_foreign_image_key(container, admin_identity) -> None:
    client = admin_client(container, admin_identity)

    response = client.post(
        "/api/admin/offers", json=offer_payload(imageKey="../secrets/key.png")
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid image key"}


def test_image_url_without_key_is_rejected(container, admin_identity) -> None:
    client = admin_client(container, admin_identity)

    response = client.post(
        "/api/admin/offers",
        json=offer_payload(imageUrl=f"{CDN_BASE_URL}/offers/a.png"),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "imageKey is required when imageUrl is set"}


def test_upload_grant_rejects_non_images(
    container, admin_identity, blob_store: FakeBlobStore
) -> None:
    client = admin_client(container, admin_identity)

    response = client.post(
        "/api/admin/upload/signed-url",
        json={"fileName": "photo.exe", "fileType": "application/octet-stream"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Only image files are allowed"}
    assert blob_store.grants == []


def test_upload_grant_requires_fields(container, admin_identity) -> None:
    client = admin_client(container, admin_identity)

    response = client.post("/api/admin/upload/signed-url", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "fileName and fileType are required"}


def test_storage_failure_gets_500(
    container, admin_identity, blob_store: FakeBlobStore
) -> None:
    blob_store.fail_grants = True
    client = admin_client(container, admin_identity)

    response = client.post(
        "/api/admin/upload/signed-url",
        json={"fileName": "a.png", "fileType": "image/png"},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate signed URL"}


def test_delete_succeeds_when_image_removal_fails(
    container, admin_identity, blob_store: FakeBlobStore
) -> None:
    client = admin_client(container, admin_identity)
    offer = client.post(
        "/api/admin/offers", json=offer_payload(imageKey="offers/a.png")
    ).json()["offer"]
    blob_store.fail_deletes = True

    response = client.delete(f"/api/admin/offers/{offer['id']}")

    assert response.status_code == 200
    assert client.get(f"/api/admin/offers/{offer['id']}").status_code == 404


def test_document_store_failure_gets_500(
    container, admin_identity, offer_repository: InMemoryOfferRepository
) -> None:
    offer_repository.failing.add("list_offers")
    client = admin_client(container, admin_identity)

    response = client.get("/api/admin/offers")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch offers"}


def test_update_with_broken_invariants_leaves_offer_unchanged(
    container, admin_identity, offer_repository: InMemoryOfferRepository
) -> None:
    client = admin_client(container, admin_identity)
    body = offer_payload()
    offer_id = client.post("/api/admin/offers", json=body).json()["offer"]["id"]
    before = dict(offer_repository.offers)

    price = client.put(
        f"/api/admin/offers/{offer_id}",
        json={**body, "title": "Changed", "discountedPrice": body["originalPrice"]},
    )
    window = client.put(
        f"/api/admin/offers/{offer_id}",
        json={**body, "title": "Changed", "validUntil": body["validFrom"]},
    )

    assert price.status_code == 400
    assert price.json() == {"error": PRICE_ORDER_MESSAGE}
    assert window.status_code == 400
    assert window.json() == {"error": WINDOW_ORDER_MESSAGE}
    assert offer_repository.offers == before
    assert "update_offer" not in offer_repository.calls
    assert client.get(f"/api/admin/offers/{offer_id}").json()["offer"]["title"] == (
        "Summer Sale"
    )


def test_update_into_the_past_expires_visible_offer(container, admin_identity) -> None:
    client = admin_client(container, admin_identity)
    offer_id = client.post("/api/admin/offers", json=offer_payload()).json()["offer"][
        "id"
    ]
    assert len(client.get("/api/offers").json()["offers"]) == 1
    now = datetime.now(tz=UTC)

    response = client.put(
        f"/api/admin/offers/{offer_id}",
        json=offer_payload(
            validFrom=(now - timedelta(days=1)).isoformat(),
            validUntil=(now - timedelta(minutes=1)).isoformat(),
        ),
    )

    assert response.status_code == 200
    offer = response.json()["offer"]
    assert offer["isHidden"] is False
    assert offer["isActive"] is False
    assert offer["status"] == "expired"
    assert client.get("/api/offers").json() == {"offers": []}
