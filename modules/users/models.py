"""
User module data models.

Stored documents use snake_case keys; the HTTP API uses the camelCase
names the web client expects (``displayName``, ``digestFrequency``, ...).
Every model accepts both.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class DigestFrequency(str, Enum):
    """How often the user receives a digest."""

    DAILY = "daily"
    WEEKLY = "weekly"


def normalize_categories(categories: list[str]) -> list[str]:
    """Strip, drop blanks and de-duplicate while keeping first-seen order."""
    seen: dict[str, None] = {}
    for category in categories:
        category = category.strip()
        if category:
            seen.setdefault(category, None)
    return list(seen)


class Preferences(BaseModel):
    """A user's digest preferences. Defaults apply to new records."""

    model_config = ConfigDict(populate_by_name=True)

    categories: list[str] = Field(default_factory=list)
    digest_frequency: DigestFrequency = Field(default=DigestFrequency.DAILY, alias="digestFrequency")
    notifications_enabled: bool = Field(default=True, alias="notificationsEnabled")

    @field_validator("categories")
    @classmethod
    def dedupe_categories(cls, v: list[str]) -> list[str]:
        return normalize_categories(v)


class PreferencesInput(BaseModel):
    """
    Body of a full preferences replace.

    Omitted fields fall back to defaults rather than to stored values.
    """

    model_config = ConfigDict(populate_by_name=True)

    categories: Optional[list[str]] = None
    digest_frequency: Optional[DigestFrequency] = Field(None, alias="digestFrequency")
    notifications_enabled: Optional[bool] = Field(None, alias="notificationsEnabled")

    def to_preferences(self) -> Preferences:
        defaults = Preferences()
        return Preferences(
            categories=self.categories if self.categories is not None else defaults.categories,
            digest_frequency=self.digest_frequency or defaults.digest_frequency,
            notifications_enabled=(
                self.notifications_enabled
                if self.notifications_enabled is not None
                else defaults.notifications_enabled
            ),
        )


class PreferencesPatch(BaseModel):
    """
    Body of a partial preferences update.

    ``digest_frequency`` is kept as a plain string so the store can reject
    unknown values itself before writing.
    """

    model_config = ConfigDict(populate_by_name=True)

    categories: Optional[list[str]] = None
    digest_frequency: Optional[str] = Field(None, alias="digestFrequency")
    notifications_enabled: Optional[bool] = Field(None, alias="notificationsEnabled")


class ProfileUpdate(BaseModel):
    """Profile fields a user may set. Omitted fields are left untouched."""

    model_config = ConfigDict(populate_by_name=True)

    display_name: Optional[str] = Field(None, alias="displayName")
    photo_url: Optional[str] = Field(None, alias="photoURL")

    def supplied_fields(self) -> dict[str, str]:
        return {k: v for k, v in self.model_dump().items() if v is not None}


class ReadHistoryEntry(BaseModel):
    """One digest the user has read."""

    model_config = ConfigDict(populate_by_name=True)

    digest_id: str = Field(..., alias="digestId")
    read_at: datetime = Field(..., alias="readAt")


class UserRecord(BaseModel):
    """
    Persisted user document, keyed by the identity provider's subject.

    ``email`` mirrors the provider claim and is not unique; lookups always
    go through ``id``.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="uid")
    email: str = ""
    display_name: str = Field(default="", alias="displayName")
    photo_url: str = Field(default="", alias="photoURL")
    preferences: Preferences = Field(default_factory=Preferences)
    read_history: list[ReadHistoryEntry] = Field(default_factory=list, alias="readHistory")
    last_login: Optional[datetime] = Field(None, alias="lastLogin")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @field_validator("email", "display_name", "photo_url", mode="before")
    @classmethod
    def none_to_empty(cls, v: Optional[str]) -> str:
        return v or ""

    @field_validator("preferences", mode="before")
    @classmethod
    def none_to_default_preferences(cls, v):
        return v if v is not None else Preferences()

    @field_validator("read_history", mode="before")
    @classmethod
    def none_to_empty_history(cls, v):
        return v if v is not None else []


# -----------------------------------------------------------------------------
# API request / response models
# -----------------------------------------------------------------------------


class HistoryEntryRequest(BaseModel):
    """Body of a read-history append."""

    model_config = ConfigDict(populate_by_name=True)

    digest_id: str = Field(..., min_length=1, alias="digestId")

    @field_validator("digest_id")
    @classmethod
    def digest_id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Digest ID is required")
        return v.strip()


class ProfileResponse(BaseModel):
    """Profile as returned to the client. Always has complete preferences."""

    model_config = ConfigDict(populate_by_name=True)

    uid: str
    email: str
    display_name: str = Field(default="", alias="displayName")
    photo_url: str = Field(default="", alias="photoURL")
    preferences: Preferences = Field(default_factory=Preferences)
    last_login: Optional[datetime] = Field(None, alias="lastLogin")


class VerifiedUser(BaseModel):
    """Identity summary returned after a successful login."""

    model_config = ConfigDict(populate_by_name=True)

    uid: str
    email: str
    email_verified: bool = Field(..., alias="emailVerified")


class VerifyResponse(BaseModel):
    """Response of POST /auth/verify."""

    message: str = "Authentication successful"
    user: VerifiedUser
