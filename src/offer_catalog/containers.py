"""Dependency container wiring for the application."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from offer_catalog.adapters.s3_blob_store import S3BlobStore
from offer_catalog.adapters.supabase_admin_repository import SupabaseAdminRepository
from offer_catalog.adapters.supabase_offer_repository import SupabaseOfferRepository
from offer_catalog.config import Settings, normalize_base_url
from offer_catalog.services.credentials import CredentialService
from offer_catalog.services.offers import OfferService
from offer_catalog.services.publication import PublicationService
from offer_catalog.services.tokens import TokenService
from offer_catalog.services.uploads import UploadBroker


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    token_service: TokenService
    credential_service: CredentialService
    offer_service: OfferService
    upload_broker: UploadBroker
    publication_service: PublicationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    token_service = TokenService(secret=resolved_settings.jwt_secret)
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    credential_service = CredentialService(SupabaseAdminRepository(supabase_client))
    offer_service = OfferService(SupabaseOfferRepository(supabase_client))
    blob_store = S3BlobStore.create(
        endpoint_url=resolved_settings.storage_endpoint_url,
        access_key_id=resolved_settings.storage_access_key_id,
        secret_access_key=resolved_settings.storage_secret_access_key,
        bucket=resolved_settings.storage_bucket,
        region=resolved_settings.storage_region,
    )
    upload_broker = UploadBroker(
        blob_store=blob_store,
        public_base_url=normalize_base_url(resolved_settings.cdn_base_url),
        key_prefix=resolved_settings.upload_prefix,
        grant_ttl_seconds=resolved_settings.upload_grant_ttl_seconds,
    )
    publication_service = PublicationService(
        offer_service=offer_service,
        upload_broker=upload_broker,
    )

    async def close_resources() -> None:
        # The Supabase sync client has no close hook; its sessions end with the
        # process.
        await asyncio.to_thread(blob_store.close)

    return AppContainer(
        settings=resolved_settings,
        token_service=token_service,
        credential_service=credential_service,
        offer_service=offer_service,
        upload_broker=upload_broker,
        publication_service=publication_service,
        close_resources=close_resources,
    )
