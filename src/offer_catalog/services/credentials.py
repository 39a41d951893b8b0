"""Administrator credential store and password checks."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

import bcrypt

from offer_catalog.domain.admins import (
    AdministratorIdentity,
    AdministratorRecord,
    normalize_email,
)
from offer_catalog.domain.errors import OfferCatalogError

_BCRYPT_MAX_BYTES = 72

_logger = logging.getLogger(__name__)


class AdminRepository(Protocol):
    """Persistence interface for administrator records."""

    def get_by_email(self, email: str) -> AdministratorRecord | None:
        """Return the administrator with a normalized email, if present."""

    def create_admin(
        self, email: str, name: str, password_hash: str
    ) -> AdministratorRecord:
        """Create and return an administrator record."""

    def count_admins(self) -> int:
        """Return the number of administrators."""

    def delete_all_admins(self) -> int:
        """Delete every administrator and return how many were removed."""


class DuplicateAdministratorError(OfferCatalogError):
    """An administrator with the same email already exists."""


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    if not password:
        raise ValueError("Password must not be blank")
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=12))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return true when the password matches the stored hash."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


@dataclass
class CredentialService:
    """Authenticates administrators against stored credentials."""

    repository: AdminRepository

    async def authenticate(
        self, email: str, password: str
    ) -> AdministratorIdentity | None:
        """Return the identity for matching credentials, otherwise None."""
        normalized = normalize_email(email)
        if not normalized or not password:
            return None
        record = await asyncio.to_thread(self.repository.get_by_email, normalized)
        if record is None:
            return None
        matches = await asyncio.to_thread(
            verify_password, password, record.password_hash
        )
        if not matches:
            return None
        return record.identity()

    def create_admin(
        self, email: str, name: str, password: str
    ) -> AdministratorIdentity:
        """Create an administrator, refusing duplicate emails."""
        normalized = normalize_email(email)
        if not normalized or not name.strip():
            raise ValueError("Email and name are required")
        if self.repository.get_by_email(normalized) is not None:
            raise DuplicateAdministratorError(
                f"Administrator {normalized} already exists"
            )
        record = self.repository.create_admin(
            normalized, name.strip(), hash_password(password)
        )
        _logger.info("Created administrator %s", record.email)
        return record.identity()

    def ensure_admin(
        self, email: str, name: str, password: str
    ) -> AdministratorIdentity | None:
        """Create the first administrator when none exist yet."""
        if self.repository.count_admins() > 0:
            return None
        return self.create_admin(email, name, password)

    def count_admins(self) -> int:
        """Return the number of administrators."""
        return self.repository.count_admins()

    def clear(self) -> int:
        """Delete all administrators."""
        return self.repository.delete_all_admins()


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
