"""Shared test fixtures."""

import threading
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from offer_catalog.api.app import create_app
from offer_catalog.api.gate import SESSION_COOKIE_NAME
from offer_catalog.config import Settings
from offer_catalog.containers import AppContainer
from offer_catalog.domain.admins import AdministratorIdentity, AdministratorRecord
from offer_catalog.domain.offers import ImageRef, Offer, OfferDraft, is_active
from offer_catalog.services.credentials import (
    AdminRepository,
    CredentialService,
    hash_password,
)
from offer_catalog.services.offers import OfferRepository, OfferService
from offer_catalog.services.publication import PublicationService
from offer_catalog.services.tokens import TokenService
from offer_catalog.services.uploads import BlobStore, UploadBroker

ADMIN_EMAIL = "admin@offers-system.com"
ADMIN_PASSWORD = "correct horse battery staple"
ADMIN_NAME = "System Administrator"
CDN_BASE_URL = "https://cdn.example.com"


class StoreUnavailableError(RuntimeError):
    """Raised by fakes to simulate an unreachable store."""


@dataclass
class InMemoryOfferRepository(OfferRepository):
    """In-memory offer repository for tests."""

    offers: dict[UUID, Offer] = field(default_factory=dict)
    failing: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock)
    _sequence: int = 0

    def create_offer(self, draft: OfferDraft, image: ImageRef | None) -> Offer:
        self._record("create_offer")
        created_at = self._next_timestamp()
        offer = Offer(
            id=uuid4(),
            title=draft.title,
            description=draft.description,
            original_price=draft.original_price,
            discounted_price=draft.discounted_price,
            valid_from=draft.valid_from,
            valid_until=draft.valid_until,
            is_hidden=False,
            created_at=created_at,
            updated_at=created_at,
            image=image,
        )
        self.offers[offer.id] = offer
        return offer

    def get_offer(self, offer_id: UUID) -> Offer | None:
        self._record("get_offer")
        return self.offers.get(offer_id)

    def update_offer(
        self, offer_id: UUID, draft: OfferDraft, image: ImageRef | None
    ) -> Offer | None:
        self._record("update_offer")
        current = self.offers.get(offer_id)
        if current is None:
            return None
        updated = replace(
            current,
            title=draft.title,
            description=draft.description,
            original_price=draft.original_price,
            discounted_price=draft.discounted_price,
            valid_from=draft.valid_from,
            valid_until=draft.valid_until,
            image=image if image is not None else current.image,
            updated_at=self._next_timestamp(),
        )
        self.offers[offer_id] = updated
        return updated

    def delete_offer(self, offer_id: UUID) -> bool:
        self._record("delete_offer")
        return self.offers.pop(offer_id, None) is not None

    def toggle_visibility(self, offer_id: UUID) -> Offer | None:
        self._record("toggle_visibility")
        with self._lock:
            current = self.offers.get(offer_id)
            if current is None:
                return None
            updated = replace(
                current,
                is_hidden=not current.is_hidden,
                updated_at=self._next_timestamp(),
            )
            self.offers[offer_id] = updated
            return updated

    def list_offers(self) -> list[Offer]:
        self._record("list_offers")
        return sorted(
            self.offers.values(), key=lambda offer: offer.created_at, reverse=True
        )

    def list_public_offers(self, now: datetime) -> list[Offer]:
        self._record("list_public_offers")
        return [offer for offer in self.list_offers() if is_active(offer, now)]

    def delete_all_offers(self) -> int:
        self._record("delete_all_offers")
        count = len(self.offers)
        self.offers.clear()
        return count

    def put(self, offer: Offer) -> Offer:
        """Store an offer directly, bypassing validation."""
        self.offers[offer.id] = offer
        return offer

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failing:
            raise StoreUnavailableError(f"{name} unavailable")

    def _next_timestamp(self) -> datetime:
        self._sequence += 1
        return datetime.now(tz=UTC) + timedelta(microseconds=self._sequence)


@dataclass
class UnfilteredOfferRepository(InMemoryOfferRepository):
    """Repository whose public query ignores visibility and windows."""

    def list_public_offers(self, now: datetime) -> list[Offer]:
        self._record("list_public_offers")
        return self.list_offers()


@dataclass
class InMemoryAdminRepository(AdminRepository):
    """In-memory administrator repository for tests."""

    admins: dict[str, AdministratorRecord] = field(default_factory=dict)

    def get_by_email(self, email: str) -> AdministratorRecord | None:
        return self.admins.get(email)

    def create_admin(
        self, email: str, name: str, password_hash: str
    ) -> AdministratorRecord:
        record = AdministratorRecord(
            id=uuid4(), email=email, name=name, password_hash=password_hash
        )
        self.admins[email] = record
        return record

    def count_admins(self) -> int:
        return len(self.admins)

    def delete_all_admins(self) -> int:
        count = len(self.admins)
        self.admins.clear()
        return count


@dataclass
class FakeBlobStore(BlobStore):
    """Blob store fake that records grants and deletions."""

    grants: list[tuple[str, str, int]] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    fail_grants: bool = False
    fail_deletes: bool = False

    def create_signed_upload_url(
        self, object_key: str, content_type: str, expires_in: int
    ) -> str:
        if self.fail_grants:
            raise StoreUnavailableError("storage unavailable")
        self.grants.append((object_key, content_type, expires_in))
        return f"https://storage.example.com/upload/{object_key}?token=signed"

    def delete_object(self, object_key: str) -> None:
        if self.fail_deletes:
            raise StoreUnavailableError("storage unavailable")
        self.deleted.append(object_key)


@dataclass
class OrphanLog:
    """Collects reconciliation hook calls."""

    entries: list[tuple[str, str]] = field(default_factory=list)

    def __call__(self, object_key: str, reason: str) -> None:
        self.entries.append((object_key, reason))


def make_draft(**overrides: object) -> OfferDraft:
    """Return a valid draft active around now."""
    now = datetime.now(tz=UTC)
    values: dict[str, object] = {
        "title": "Summer Sale",
        "description": "Half price on everything",
        "original_price": 100.0,
        "discounted_price": 50.0,
        "valid_from": now - timedelta(hours=1),
        "valid_until": now + timedelta(hours=1),
    }
    values.update(overrides)
    return OfferDraft(**values)  # type: ignore[arg-type]


def offer_payload(**overrides: object) -> dict[str, object]:
    """Return a valid JSON body for offer create and update."""
    now = datetime.now(tz=UTC)
    body: dict[str, object] = {
        "title": "Summer Sale",
        "description": "Half price on everything",
        "originalPrice": 100,
        "discountedPrice": 50,
        "validFrom": (now - timedelta(hours=1)).isoformat(),
        "validUntil": (now + timedelta(hours=1)).isoformat(),
    }
    body.update(overrides)
    return body


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret="test-signing-secret-with-enough-length",
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        storage_endpoint_url="https://example.supabase.co/storage/v1/s3",
        storage_access_key_id="test-access-key",
        storage_secret_access_key="test-secret-key",
        storage_bucket="offer-images",
        cdn_base_url=CDN_BASE_URL,
    )


@pytest.fixture
def offer_repository() -> InMemoryOfferRepository:
    return InMemoryOfferRepository()


@pytest.fixture
def admin_repository() -> InMemoryAdminRepository:
    return InMemoryAdminRepository()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def orphans() -> OrphanLog:
    return OrphanLog()


@pytest.fixture
def token_service(settings: Settings) -> TokenService:
    return TokenService(secret=settings.jwt_secret)


@pytest.fixture
def offer_service(offer_repository: InMemoryOfferRepository) -> OfferService:
    return OfferService(offer_repository)


@pytest.fixture
def upload_broker(blob_store: FakeBlobStore) -> UploadBroker:
    return UploadBroker(blob_store=blob_store, public_base_url=CDN_BASE_URL)


@pytest.fixture
def publication_service(
    offer_service: OfferService, upload_broker: UploadBroker, orphans: OrphanLog
) -> PublicationService:
    return PublicationService(
        offer_service=offer_service,
        upload_broker=upload_broker,
        on_orphaned_object=orphans,
    )


@pytest.fixture
def admin_identity(admin_repository: InMemoryAdminRepository) -> AdministratorIdentity:
    record = admin_repository.create_admin(
        ADMIN_EMAIL, ADMIN_NAME, hash_password(ADMIN_PASSWORD)
    )
    return record.identity()


@pytest.fixture
def container(
    settings: Settings,
    token_service: TokenService,
    admin_repository: InMemoryAdminRepository,
    offer_service: OfferService,
    upload_broker: UploadBroker,
    publication_service: PublicationService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        token_service=token_service,
        credential_service=CredentialService(admin_repository),
        offer_service=offer_service,
        upload_broker=upload_broker,
        publication_service=publication_service,
        close_resources=close_resources,
    )


def admin_client(
    container: AppContainer, identity: AdministratorIdentity
) -> TestClient:
    """Return a test client carrying a valid session cookie."""
    client = TestClient(create_app(container))
    client.cookies.set(SESSION_COOKIE_NAME, container.token_service.issue(identity))
    return client
