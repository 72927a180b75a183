"""
Authentication module interface.

Other modules should depend on these protocols, not the concrete
implementations. This enables testing with fakes and swapping the
identity provider without touching the request path.
"""

from typing import Mapping, Protocol, runtime_checkable

from shared.models import Principal

from .models import Claims


@runtime_checkable
class IIdentityVerifier(Protocol):
    """
    Interface for an external identity provider.

    Implementations verify a bearer token and return its claims.
    """

    @property
    def mode(self) -> str:
        """Short name of the verification strategy (e.g. "secret")."""
        ...

    @property
    def is_configured(self) -> bool:
        """Whether the verifier has the credentials it needs."""
        ...

    async def verify(self, token: str) -> Claims:
        """
        Verify a token and return its claims.

        Args:
            token: Raw bearer token (without the "Bearer " prefix)

        Returns:
            Claims decoded from the verified token

        Raises:
            TokenVerificationError: If the token is invalid, expired,
                or the provider cannot be reached
            VerifierUnavailableError: If the verifier is not configured
        """
        ...

    async def close(self) -> None:
        """Release network resources held by the verifier."""
        ...


@runtime_checkable
class IAuthGate(Protocol):
    """
    Interface for request authentication.

    The gate turns request headers into a verified Principal.
    """

    async def authenticate(self, headers: Mapping[str, str]) -> Principal:
        """
        Authenticate a request from its headers.

        Args:
            headers: Request headers (case-insensitive lookup of Authorization)

        Returns:
            Principal for the caller

        Raises:
            AuthError: If the request cannot be authenticated
        """
        ...
