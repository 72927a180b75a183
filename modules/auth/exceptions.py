"""
Authentication module exceptions.

These exceptions are raised by the auth gate and caught by the API
auth dependency, which turns them into HTTP responses. Every AuthError
is a 401 except VerifierUnavailableError, which signals a server-side
misconfiguration.
"""

from typing import Optional

from shared.exceptions import AuthenticationError, DigestError


class AuthError(AuthenticationError):
    """Base class for request authentication failures."""

    status_code: int = 401


class MissingHeaderError(AuthError):
    """Raised when the request carries no Authorization header."""

    def __init__(self, message: str = "Unauthorized: Missing authorization header"):
        super().__init__(message, code="MISSING_HEADER")


class BadFormatError(AuthError):
    """Raised when the Authorization header is not a Bearer credential."""

    def __init__(self, message: str = "Unauthorized: Invalid token format"):
        super().__init__(message, code="BAD_FORMAT")


class EmptyTokenError(AuthError):
    """Raised when the bearer token is empty or a stringified null."""

    def __init__(self, message: str = "Unauthorized: Empty token"):
        super().__init__(message, code="EMPTY_TOKEN")


class VerificationFailedError(AuthError):
    """Raised when the identity provider rejects the token or fails."""

    def __init__(self, provider_code: Optional[str], provider_message: str):
        super().__init__(
            "Unauthorized: Invalid token",
            code="VERIFICATION_FAILED",
            details={
                "provider_code": provider_code or "unknown",
                "provider_message": provider_message,
            },
        )
        self.provider_code = provider_code or "unknown"
        self.provider_message = provider_message


class InvalidClaimsError(AuthError):
    """Raised when a verified token carries no subject identifier."""

    def __init__(self, message: str = "Unauthorized: Invalid token content"):
        super().__init__(message, code="INVALID_CLAIMS")


class VerifierUnavailableError(AuthError):
    """Raised when no identity verifier is configured on the server."""

    status_code = 500

    def __init__(self, message: str = "Server configuration error: token verification not configured"):
        super().__init__(message, code="VERIFIER_UNAVAILABLE")


class TokenVerificationError(DigestError):
    """
    Raised by identity verifiers when a token cannot be verified.

    Carries a provider-style error code (e.g. ``token_expired``) that the
    auth gate surfaces in VerificationFailedError.
    """

    def __init__(self, code: str, message: str):
        super().__init__(message, code=code)
