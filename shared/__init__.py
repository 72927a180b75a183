"""
Shared infrastructure for the Digest backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management and startup checks
- database: Supabase client factory
- exceptions: Base exception classes
- logging_config: Root logging setup
- models: The request-scoped Principal

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, EnvironmentStatus, check_environment, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    DigestError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    ExternalServiceError,
)
from .logging_config import configure_logging, mask_token
from .models import Principal

__all__ = [
    "Settings",
    "EnvironmentStatus",
    "check_environment",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "DigestError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "ExternalServiceError",
    "configure_logging",
    "mask_token",
    "Principal",
]
