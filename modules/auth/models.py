"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from typing import Any, Optional, Union
from pydantic import BaseModel, Field


class Claims(BaseModel):
    """
    Decoded, provider-signed attributes of a verified token.

    Supabase and Firebase tokens spell some claims differently;
    from_payload() normalises both into this shape.
    """

    subject: Optional[str] = Field(None, description="Subject (user ID)")
    email: Optional[str] = Field(None, description="User's email")
    email_verified: bool = Field(default=False, description="Whether the email is verified")
    name: Optional[str] = Field(None, description="Display name, if the provider has one")
    exp: Optional[int] = Field(None, description="Expiration timestamp")
    iss: Optional[str] = Field(None, description="Issuer")
    aud: Optional[Union[str, list[str]]] = Field(None, description="Audience")

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Claims":
        """Build Claims from a decoded JWT payload."""
        metadata = payload.get("user_metadata") or {}

        if "email_verified" in payload:
            email_verified = bool(payload["email_verified"])
        elif "email_verified" in metadata:
            email_verified = bool(metadata["email_verified"])
        else:
            email_verified = payload.get("email_confirmed_at") is not None

        name = payload.get("name") or metadata.get("full_name") or metadata.get("name")

        return cls(
            subject=payload.get("sub") or None,
            email=payload.get("email"),
            email_verified=email_verified,
            name=name,
            exp=payload.get("exp"),
            iss=payload.get("iss"),
            aud=payload.get("aud"),
        )
