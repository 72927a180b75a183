"""
Users module.

Stores user records keyed by the identity provider's subject, along
with digest preferences and read history.

Public API:
- IUserStore: Store interface
- SupabaseUserStore / InMemoryUserStore: Store implementations
- ProfileService: Profile, preference and history operations
- Models: Preferences, UserRecord, ReadHistoryEntry, etc.
"""

from .interfaces import IUserStore
from .models import (
    DigestFrequency,
    Preferences,
    PreferencesInput,
    PreferencesPatch,
    ProfileUpdate,
    ReadHistoryEntry,
    UserRecord,
    HistoryEntryRequest,
    ProfileResponse,
    VerifiedUser,
    VerifyResponse,
    normalize_categories,
)
from .exceptions import (
    UserNotFoundError,
    InvalidPreferenceError,
    StoreUnavailableError,
)
from .repository import SupabaseUserStore, InMemoryUserStore, preference_changes
from .service import ProfileService

__all__ = [
    # Interface
    "IUserStore",
    # Models
    "DigestFrequency",
    "Preferences",
    "PreferencesInput",
    "PreferencesPatch",
    "ProfileUpdate",
    "ReadHistoryEntry",
    "UserRecord",
    "HistoryEntryRequest",
    "ProfileResponse",
    "VerifiedUser",
    "VerifyResponse",
    "normalize_categories",
    # Exceptions
    "UserNotFoundError",
    "InvalidPreferenceError",
    "StoreUnavailableError",
    # Implementations
    "SupabaseUserStore",
    "InMemoryUserStore",
    "preference_changes",
    "ProfileService",
]
