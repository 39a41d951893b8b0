"""Signed session tokens for administrators."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt

from offer_catalog.domain.admins import AdministratorIdentity

_ALGORITHM = "HS256"
SESSION_TTL = timedelta(days=7)
_REQUIRED_CLAIMS = ["sub", "email", "name", "iat", "exp"]

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class TokenService:
    """Issues and verifies HS256 session tokens."""

    secret: str
    ttl: timedelta = SESSION_TTL
    clock: Callable[[], datetime] = field(default=_utcnow)

    def __post_init__(self) -> None:
        if not self.secret or not self.secret.strip():
            raise ValueError("Session signing secret is not configured")

    def issue(self, identity: AdministratorIdentity) -> str:
        """Return a signed token for the identity, valid for ``ttl``."""
        issued_at = self.clock()
        claims = {
            "sub": str(identity.id),
            "email": identity.email,
            "name": identity.name,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=_ALGORITHM)

    def verify(self, token: str | None) -> AdministratorIdentity | None:
        """Return the identity for a valid token, otherwise None.

        Expired, tampered and malformed tokens all produce the same None.
        """
        if not token:
            return None
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[_ALGORITHM],
                options={"require": _REQUIRED_CLAIMS},
            )
            identity = AdministratorIdentity(
                id=UUID(str(claims["sub"])),
                email=_require_text(claims["email"]),
                name=_require_text(claims["name"]),
            )
        except (jwt.InvalidTokenError, ValueError, TypeError) as exc:
            _logger.debug("Session token rejected: %s", type(exc).__name__)
            return None
        return identity


def _require_text(value: object) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError("claim must be a non-empty string")
    return value
