"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    jwt_secret: str
    supabase_url: str
    supabase_service_key: str
    storage_endpoint_url: str
    storage_access_key_id: str
    storage_secret_access_key: str
    storage_bucket: str
    cdn_base_url: str
    storage_region: str = "us-east-1"
    upload_prefix: str = "offers"
    upload_grant_ttl_seconds: int = 3600
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def secure_cookies(self) -> bool:
        """Return whether session cookies must be marked Secure."""
        return self.environment == "production"


def normalize_base_url(raw: str) -> str:
    """Strip whitespace and trailing slashes from a public base URL."""
    return raw.strip().rstrip("/")
