"""
Profile service implementation.

Combines the authenticated Principal with the user store. Read
operations degrade to default values when the store fails so the
reading experience stays available; write operations propagate store
failures so the client knows whether its write landed.
"""

import asyncio
import logging
from typing import Any, Callable, TypeVar

from shared.models import Principal

from .exceptions import StoreUnavailableError
from .interfaces import IUserStore
from .models import (
    Preferences,
    PreferencesInput,
    PreferencesPatch,
    ProfileResponse,
    ProfileUpdate,
    ReadHistoryEntry,
    UserRecord,
    VerifiedUser,
    VerifyResponse,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ProfileService:
    """
    Profile, preference and read-history operations for one user.

    Store calls are blocking, so they run in a worker thread and are
    bounded by ``timeout`` seconds.
    """

    def __init__(self, store: IUserStore, timeout: float = 10.0):
        self._store = store
        self._timeout = timeout

    @property
    def store(self) -> IUserStore:
        return self._store

    async def _call(self, fn: Callable[..., R], *args: Any) -> R:
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise StoreUnavailableError(
                f"{getattr(fn, '__name__', 'store call')} timed out after {self._timeout}s"
            ) from e

    # -------------------------------------------------------------------------
    # Login
    # -------------------------------------------------------------------------

    async def verify_login(self, principal: Principal) -> VerifyResponse:
        """
        Find or create the user's record and refresh the login time.

        A failed login-time refresh is logged and does not fail the login.

        Raises:
            StoreUnavailableError: If the record cannot be created
        """
        await self._call(
            self._store.find_or_create, principal.id, principal.email, ""
        )
        try:
            await self._call(self._store.touch_login, principal.id)
        except Exception as e:
            logger.warning(f"Could not refresh last_login for {principal.id}: {e}")

        return VerifyResponse(
            user=VerifiedUser(
                uid=principal.id,
                email=principal.email,
                email_verified=principal.email_verified,
            )
        )

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    async def get_profile(self, principal: Principal) -> ProfileResponse:
        """Return the profile, creating a minimal record on first access."""
        try:
            record = await self._call(
                self._store.find_or_create,
                principal.id,
                principal.email,
                principal.display_name,
            )
        except StoreUnavailableError as e:
            logger.error(f"Error loading profile for {principal.id}, returning defaults: {e}")
            return ProfileResponse(uid=principal.id, email=principal.email)

        return self._profile_response(principal, record)

    async def update_profile(self, principal: Principal, update: ProfileUpdate) -> ProfileResponse:
        """
        Merge the supplied profile fields.

        Raises:
            StoreUnavailableError: If the write fails
        """
        record = await self._call(self._store.upsert_profile_fields, principal.id, update)
        return self._profile_response(principal, record)

    # -------------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------------

    async def get_preferences(self, principal: Principal) -> Preferences:
        """Return stored preferences, or defaults if none are available."""
        try:
            record = await self._call(self._store.find_by_id, principal.id)
        except StoreUnavailableError as e:
            logger.error(f"Error fetching preferences for {principal.id}, returning defaults: {e}")
            return Preferences()

        if record is None:
            return Preferences()
        return record.preferences

    async def replace_preferences(self, principal: Principal, body: PreferencesInput) -> Preferences:
        """
        Replace all preferences; omitted fields reset to defaults.

        Raises:
            StoreUnavailableError: If the write fails
        """
        record = await self._call(
            self._store.replace_preferences,
            principal.id,
            body.to_preferences(),
            principal.email,
        )
        return record.preferences

    async def patch_preferences(self, principal: Principal, patch: PreferencesPatch) -> Preferences:
        """
        Merge only the supplied preference fields.

        Raises:
            InvalidPreferenceError: If digest_frequency is invalid
            UserNotFoundError: If the user has no record yet
            StoreUnavailableError: If the write fails
        """
        record = await self._call(self._store.patch_preferences, principal.id, patch)
        return record.preferences

    # -------------------------------------------------------------------------
    # Read history
    # -------------------------------------------------------------------------

    async def get_history(self, principal: Principal) -> list[ReadHistoryEntry]:
        """Return the read history, empty if unavailable."""
        try:
            return await self._call(self._store.get_history, principal.id)
        except StoreUnavailableError as e:
            logger.error(f"Error fetching history for {principal.id}, returning empty: {e}")
            return []

    async def add_history(self, principal: Principal, digest_id: str) -> list[ReadHistoryEntry]:
        """
        Record that the user read a digest. Re-reads are not duplicated.

        Raises:
            StoreUnavailableError: If the write fails
        """
        return await self._call(self._store.append_history, principal.id, digest_id)

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    async def count_users(self) -> int:
        return await self._call(self._store.count_users)

    def _profile_response(self, principal: Principal, record: UserRecord) -> ProfileResponse:
        return ProfileResponse(
            uid=principal.id,
            email=principal.email or record.email,
            display_name=record.display_name,
            photo_url=record.photo_url,
            preferences=record.preferences,
            last_login=record.last_login,
        )
