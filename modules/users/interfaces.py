"""
User store interface.

The profile service depends on IUserStore, not on Supabase. Every
operation is keyed by the user ID and touches exactly one document.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import (
    Preferences,
    PreferencesPatch,
    ProfileUpdate,
    ReadHistoryEntry,
    UserRecord,
)


@runtime_checkable
class IUserStore(Protocol):
    """Interface for user document storage."""

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Return the record for ``user_id``, or None. No side effects."""
        ...

    def find_or_create(self, user_id: str, email: str, display_name: str = "") -> UserRecord:
        """
        Return the existing record, or create one with default preferences.

        An existing record is returned unchanged.
        """
        ...

    def touch_login(self, user_id: str) -> None:
        """Set last_login to now. Failures are logged, never raised."""
        ...

    def upsert_profile_fields(self, user_id: str, update: ProfileUpdate) -> UserRecord:
        """
        Set only the supplied profile fields, creating the record if absent.

        Always refreshes last_login and updated_at.
        """
        ...

    def replace_preferences(self, user_id: str, preferences: Preferences, email: str = "") -> UserRecord:
        """Replace the whole preferences object, creating the record if absent."""
        ...

    def patch_preferences(self, user_id: str, patch: PreferencesPatch) -> UserRecord:
        """
        Merge the supplied preference fields into the existing record.

        Raises:
            InvalidPreferenceError: If digest_frequency is not daily/weekly
            UserNotFoundError: If the user has no record
        """
        ...

    def append_history(self, user_id: str, digest_id: str) -> list[ReadHistoryEntry]:
        """Append a read entry unless ``digest_id`` is already present."""
        ...

    def get_history(self, user_id: str) -> list[ReadHistoryEntry]:
        """Return the read history, empty for unknown users."""
        ...

    def count_users(self) -> int:
        """Return the number of stored user records."""
        ...

    def ping(self) -> bool:
        """Return True when the store answers a trivial query."""
        ...
