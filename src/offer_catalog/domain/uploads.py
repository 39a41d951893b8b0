"""Domain models for image uploads."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UploadGrant:
    """Time-boxed permission to PUT one object into the blob store."""

    url: str
    object_key: str
    public_url: str
    content_type: str
    expires_at: datetime
    method: str = "PUT"


@dataclass(frozen=True)
class UploadReceipt:
    """Caller report that an object was transferred under a grant."""

    object_key: str
    public_url: str | None = None
