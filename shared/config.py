"""
Centralized configuration for the Digest backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*, JWT_*).
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Digest API"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "production"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = [
        "https://build-ai-digest.vercel.app",
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]
    cors_allow_headers: list[str] = ["X-Requested-With", "Content-Type", "Authorization"]
    cors_max_age: int = 86400  # 24 hours

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_jwt_secret: str = ""
    supabase_db_url: str = ""
    users_table: str = "users"

    # Token verification
    token_verification: Literal["secret", "jwks"] = "secret"
    jwks_url: str = ""
    jwt_audience: str = "authenticated"
    jwt_issuer: str = ""
    jwt_leeway_seconds: int = 10  # Clock skew tolerance
    jwks_cache_ttl_seconds: int = 3600
    auth_timeout_seconds: float = 10.0

    # User store
    store_backend: Literal["supabase", "memory"] = "supabase"
    store_timeout_seconds: float = 10.0


@dataclass
class EnvironmentStatus:
    """Result of the startup environment check."""

    missing: list[str] = field(default_factory=list)
    malformed: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.missing and not self.malformed


def check_environment(settings: Settings) -> EnvironmentStatus:
    """
    Verify that the settings required by the selected backends are present.

    Only the settings needed by the configured token verifier and user
    store are checked, so a memory-backed store needs no Supabase keys.
    """
    status = EnvironmentStatus()

    required: dict[str, str] = {}
    if settings.store_backend == "supabase":
        required["SUPABASE_URL"] = settings.supabase_url
        required["SUPABASE_SERVICE_ROLE_KEY"] = settings.supabase_service_role_key
    if settings.token_verification == "secret":
        required["SUPABASE_JWT_SECRET"] = settings.supabase_jwt_secret
    else:
        required["JWKS_URL"] = settings.jwks_url

    for name, value in required.items():
        if not value:
            status.missing.append(name)
        elif name in ("SUPABASE_URL", "JWKS_URL") and not value.startswith(("http://", "https://")):
            status.malformed.append(name)

    return status


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
