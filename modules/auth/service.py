"""
Authentication gate implementation.

Extracts the bearer token from request headers, verifies it with the
configured identity provider and builds the request's Principal.
"""

import asyncio
import logging
from typing import Mapping, Optional

from shared.logging_config import mask_token
from shared.models import Principal

from .interfaces import IAuthGate, IIdentityVerifier
from .models import Claims
from .exceptions import (
    AuthError,
    BadFormatError,
    EmptyTokenError,
    InvalidClaimsError,
    MissingHeaderError,
    VerificationFailedError,
    VerifierUnavailableError,
)

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

# Clients that stringify a missing value send these instead of a token
EMPTY_TOKEN_VALUES = frozenset({"", "undefined", "null"})


def extract_bearer_token(headers: Mapping[str, str]) -> str:
    """
    Extract the bearer token from request headers.

    Args:
        headers: Request headers; the Authorization lookup is case-insensitive

    Returns:
        The token with surrounding whitespace removed

    Raises:
        MissingHeaderError: If there is no Authorization header
        BadFormatError: If the header does not start with "Bearer "
        EmptyTokenError: If the token is empty, "undefined" or "null"
    """
    auth_header: Optional[str] = None
    for name, value in headers.items():
        if name.lower() == "authorization":
            auth_header = value
            break

    if auth_header is None:
        raise MissingHeaderError()

    if not auth_header.startswith(BEARER_PREFIX):
        raise BadFormatError()

    token = auth_header[len(BEARER_PREFIX):].strip()
    if token in EMPTY_TOKEN_VALUES:
        raise EmptyTokenError()

    return token


class AuthGate(IAuthGate):
    """
    Request-level gatekeeper.

    A single verification attempt is made per request; failures are
    terminal and the client must re-authenticate.
    """

    def __init__(self, verifier: Optional[IIdentityVerifier], timeout: float = 10.0):
        self._verifier = verifier
        self._timeout = timeout

    @property
    def verifier(self) -> Optional[IIdentityVerifier]:
        return self._verifier

    async def authenticate(self, headers: Mapping[str, str]) -> Principal:
        """Authenticate a request and return its Principal."""
        token = extract_bearer_token(headers)

        if self._verifier is None or not self._verifier.is_configured:
            logger.error("Token verifier is not configured")
            raise VerifierUnavailableError()

        claims = await self.verify_token(token)

        if not (claims.subject or "").strip():
            logger.error("Token decoded but no subject found")
            raise InvalidClaimsError()

        principal = Principal(
            id=claims.subject,
            email=claims.email or "",
            email_verified=claims.email_verified,
            display_name=claims.name or "",
        )
        logger.info(f"Authenticated user: {principal.id}")
        return principal

    async def verify_token(self, token: str) -> Claims:
        """
        Run the verifier with a timeout.

        Raises:
            VerificationFailedError: If verification fails or times out
            VerifierUnavailableError: If the verifier reports it is unconfigured
        """
        if self._verifier is None:
            raise VerifierUnavailableError()

        try:
            return await asyncio.wait_for(self._verifier.verify(token), timeout=self._timeout)
        except AuthError:
            raise
        except asyncio.TimeoutError as e:
            logger.warning(f"Token verification timed out after {self._timeout}s")
            raise VerificationFailedError(
                "timeout", "Identity provider did not respond in time"
            ) from e
        except Exception as e:
            code = getattr(e, "code", None)
            logger.warning(
                f"Token verification failed for {mask_token(token)}: {e}",
                extra={"provider_code": code},
            )
            raise VerificationFailedError(code, str(e)) from e
