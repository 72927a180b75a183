"""
Authentication module.

Handles bearer token extraction, identity provider verification and
construction of the request Principal.

Public API:
- IAuthGate / IIdentityVerifier: Interfaces for auth operations
- AuthGate: Request authentication gate
- SecretTokenVerifier / JWKSTokenVerifier: Identity verifiers
- Claims: Decoded token claims
- Auth exceptions: MissingHeaderError, BadFormatError, etc.
"""

from .interfaces import IAuthGate, IIdentityVerifier
from .models import Claims
from .exceptions import (
    AuthError,
    MissingHeaderError,
    BadFormatError,
    EmptyTokenError,
    VerificationFailedError,
    InvalidClaimsError,
    VerifierUnavailableError,
    TokenVerificationError,
)
from .service import AuthGate, extract_bearer_token
from .verifier import (
    SecretTokenVerifier,
    JWKSCache,
    JWKSTokenVerifier,
    build_identity_verifier,
)

__all__ = [
    # Interfaces
    "IAuthGate",
    "IIdentityVerifier",
    # Models
    "Claims",
    # Exceptions
    "AuthError",
    "MissingHeaderError",
    "BadFormatError",
    "EmptyTokenError",
    "VerificationFailedError",
    "InvalidClaimsError",
    "VerifierUnavailableError",
    "TokenVerificationError",
    # Gate
    "AuthGate",
    "extract_bearer_token",
    # Verifiers
    "SecretTokenVerifier",
    "JWKSCache",
    "JWKSTokenVerifier",
    "build_identity_verifier",
]
