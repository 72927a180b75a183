"""
Error hierarchy for the Digest API.

Every error raised on purpose by the backend derives from DigestError,
which carries a machine-readable code, a human message, optional
details and the HTTP status the API answers with. Modules subclass the
category bases below (NotFoundError, ValidationError, ...) and inherit
the status from them; the app-level handler in api/app.py renders
whatever reaches it with ``to_dict()``.
"""

from typing import Optional, Any


class DigestError(Exception):
    """
    Base exception for errors the API reports to clients.

    ``code`` defaults to the class name so ad-hoc errors still get a
    stable identifier in the response body.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Response body: ``{error, message, details}``."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(DigestError):
    """A user record or other resource does not exist."""

    status_code = 404


class ValidationError(DigestError):
    """Client input was rejected before anything was written."""

    status_code = 400


class AuthenticationError(DigestError):
    """The request could not be tied to a verified user."""

    status_code = 401


class ExternalServiceError(DigestError):
    """
    A backing service (Supabase, the identity provider) failed.

    The failing service's name is recorded in ``details["service"]``.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
