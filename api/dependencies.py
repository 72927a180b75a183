"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations from settings.
"""

from typing import TYPE_CHECKING

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IAuthGate, IIdentityVerifier
    from modules.users.interfaces import IUserStore
    from modules.users.service import ProfileService


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached as singletons
    within the container. Use reset() to clear them for testing.
    """

    def __init__(self) -> None:
        self._identity_verifier: "IIdentityVerifier | None" = None
        self._auth_gate: "IAuthGate | None" = None
        self._user_store: "IUserStore | None" = None
        self._profile_service: "ProfileService | None" = None

    @property
    def identity_verifier(self) -> "IIdentityVerifier":
        """Get the token verifier selected by TOKEN_VERIFICATION."""
        if self._identity_verifier is None:
            from modules.auth.verifier import build_identity_verifier
            from shared.config import get_settings
            self._identity_verifier = build_identity_verifier(get_settings())
        return self._identity_verifier

    @property
    def auth(self) -> "IAuthGate":
        """Get the auth gate instance."""
        if self._auth_gate is None:
            from modules.auth.service import AuthGate
            from shared.config import get_settings
            self._auth_gate = AuthGate(
                self.identity_verifier,
                timeout=get_settings().auth_timeout_seconds,
            )
        return self._auth_gate

    @property
    def user_store(self) -> "IUserStore":
        """Get the user store selected by STORE_BACKEND."""
        if self._user_store is None:
            from shared.config import get_settings
            settings = get_settings()
            if settings.store_backend == "memory":
                from modules.users.repository import InMemoryUserStore
                self._user_store = InMemoryUserStore()
            else:
                from modules.users.repository import SupabaseUserStore
                from shared.database import get_supabase_client
                self._user_store = SupabaseUserStore(
                    get_supabase_client(), table=settings.users_table
                )
        return self._user_store

    @property
    def profiles(self) -> "ProfileService":
        """Get the profile service instance."""
        if self._profile_service is None:
            from modules.users.service import ProfileService
            from shared.config import get_settings
            self._profile_service = ProfileService(
                self.user_store,
                timeout=get_settings().store_timeout_seconds,
            )
        return self._profile_service

    async def close(self) -> None:
        """Release resources held by created services."""
        if self._identity_verifier is not None:
            await self._identity_verifier.close()

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._identity_verifier = None
        self._auth_gate = None
        self._user_store = None
        self._profile_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() will create a fresh container with
    new service instances. Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_gate() -> "IAuthGate":
    """FastAPI dependency for the auth gate."""
    return get_container().auth


def get_identity_verifier() -> "IIdentityVerifier":
    """FastAPI dependency for the token verifier."""
    return get_container().identity_verifier


def get_user_store() -> "IUserStore":
    """FastAPI dependency for the user store."""
    return get_container().user_store


def get_profile_service() -> "ProfileService":
    """FastAPI dependency for the profile service."""
    return get_container().profiles
