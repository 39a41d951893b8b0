"""Administrator domain models."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class AdministratorRecord:
    """Stored administrator credentials."""

    id: UUID
    email: str
    name: str
    password_hash: str

    def identity(self) -> "AdministratorIdentity":
        """Return the public identity without the password hash."""
        return AdministratorIdentity(id=self.id, email=self.email, name=self.name)


@dataclass(frozen=True)
class AdministratorIdentity:
    """Verified administrator identity carried by a session."""

    id: UUID
    email: str
    name: str


def normalize_email(email: str) -> str:
    """Normalize an email for case-insensitive lookups."""
    return (email or "").strip().lower()
