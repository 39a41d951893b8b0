"""S3-compatible object store holding offer images."""

from dataclasses import dataclass
from typing import Any

import boto3
from botocore.config import Config

from offer_catalog.services.uploads import BlobStore


@dataclass
class S3BlobStore(BlobStore):
    """Presigned uploads and deletes against one bucket.

    Works with any S3-compatible endpoint, including Supabase Storage's S3
    gateway and Cloudflare R2. The presigned PUT signs the content type and
    carries its own expiry, so a grant cannot outlive ``expires_in`` or accept
    a different ``Content-Type``.
    """

    client: Any
    bucket: str

    @classmethod
    def create(
        cls,
        endpoint_url: str,
        access_key_id: str,
        secret_access_key: str,
        bucket: str,
        region: str = "us-east-1",
    ) -> "S3BlobStore":
        """Create a store with a SigV4 path-style client."""
        client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
            config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        )
        return cls(client=client, bucket=bucket)

    def create_signed_upload_url(
        self, object_key: str, content_type: str, expires_in: int
    ) -> str:
        """Return a presigned PUT URL bound to the key, type and lifetime."""
        return self.client.generate_presigned_url(
            "put_object",
            Params={
                "Bucket": self.bucket,
                "Key": object_key,
                "ContentType": content_type,
            },
            ExpiresIn=expires_in,
            HttpMethod="PUT",
        )

    def delete_object(self, object_key: str) -> None:
        """Remove one object from the bucket."""
        self.client.delete_object(Bucket=self.bucket, Key=object_key)

    def close(self) -> None:
        """Close the client's connection pool."""
        self.client.close()
