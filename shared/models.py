"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from pydantic import BaseModel, Field, field_validator


class Principal(BaseModel):
    """
    The verified identity of the caller for the duration of one request.

    Built by the auth gate from verified token claims and made available
    to route handlers via dependency injection. Never persisted.
    """

    id: str = Field(..., min_length=1, description="Stable subject identifier")
    email: str = Field(default="", description="Email claim from the provider")
    email_verified: bool = Field(default=False, description="Whether email is verified")
    display_name: str = Field(default="", description="Name claim, empty if absent")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",
    }

    @field_validator("id")
    @classmethod
    def id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Principal id must not be blank")
        return v
