"""Caller-side image transfer against an upload grant."""

from dataclasses import dataclass

import httpx

from offer_catalog.domain.uploads import UploadGrant


@dataclass
class HttpxBlobUploader:
    """Uploads image bytes straight to the blob store using httpx."""

    http_client: httpx.AsyncClient
    timeout: float = 60

    @classmethod
    def create(cls) -> "HttpxBlobUploader":
        """Create an uploader with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient())

    async def upload(self, grant: UploadGrant, content: bytes) -> None:
        """PUT the bytes to the grant URL with the declared content type."""
        response = await self.http_client.request(
            grant.method,
            grant.url,
            content=content,
            headers={"Content-Type": grant.content_type},
            timeout=self.timeout,
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
